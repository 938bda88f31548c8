"""
Create an admin user, or promote an existing user to admin.

Usage:
    python manage.py create_admin --email admin@example.com --password secret123
"""
from getpass import getpass

from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from craftstudio.core.models import User


class Command(BaseCommand):
    help = 'Create an admin user or promote an existing user to admin'

    def add_arguments(self, parser):
        parser.add_argument('--email', type=str, help='Admin email address')
        parser.add_argument('--password', type=str, help='Password (prompted when omitted)')
        parser.add_argument('--first-name', type=str, default='Admin')
        parser.add_argument('--last-name', type=str, default='User')

    def handle(self, *args, **options):
        email = options.get('email') or input('Email: ')
        email = (email or '').strip().lower()
        if not email:
            raise CommandError('Email is required')

        user = User.objects.filter(email=email).first()
        password = options.get('password')
        if not password and not user:
            password = getpass('Password: ')
        if password is not None and len(password) < 6:
            raise CommandError('Password must be at least 6 characters long')

        with transaction.atomic():
            if user:
                user.role = User.ROLE_ADMIN
                user.is_active = True
                if password:
                    user.set_password(password)
                user.save()
                self.stdout.write(self.style.SUCCESS(f"✅ Promoted existing user to admin: {user.email}"))
            else:
                user = User.objects.create_user(
                    email=email,
                    password=password,
                    first_name=options['first_name'],
                    last_name=options['last_name'],
                    role=User.ROLE_ADMIN,
                )
                self.stdout.write(self.style.SUCCESS(f"✅ Created admin user: {user.email}"))

        self.stdout.write(f"   Name: {user.full_name}")
        self.stdout.write(f"   Role: {user.role}")
