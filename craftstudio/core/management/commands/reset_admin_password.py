"""
Reset the password of an existing user and make sure they are an admin.

Usage:
    python manage.py reset_admin_password admin@example.com --password newsecret
"""
from getpass import getpass

from django.core.management.base import BaseCommand, CommandError

from craftstudio.core.models import User


class Command(BaseCommand):
    help = 'Set a new password for a user and ensure the admin role'

    def add_arguments(self, parser):
        parser.add_argument('email', type=str)
        parser.add_argument('--password', type=str, help='New password (prompted when omitted)')

    def handle(self, *args, **options):
        email = options['email'].strip().lower()
        user = User.objects.filter(email=email).first()
        if not user:
            raise CommandError(f'User not found: {email}')

        password = options.get('password') or getpass('New password: ')
        if len(password) < 6:
            raise CommandError('Password must be at least 6 characters long')

        user.set_password(password)
        user.role = User.ROLE_ADMIN
        user.save()

        self.stdout.write(self.style.SUCCESS('✅ Admin password reset successfully'))
        self.stdout.write(f"   Email: {user.email}")
        self.stdout.write(f"   Role: {user.role}")
        self.stdout.write(f"   Name: {user.full_name}")
