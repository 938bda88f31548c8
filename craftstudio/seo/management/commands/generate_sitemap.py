from pathlib import Path

from django.core.management.base import BaseCommand

from craftstudio.seo.sitemaps import render_sitemap


class Command(BaseCommand):
    help = 'Write the storefront sitemap.xml to a file'

    def add_arguments(self, parser):
        parser.add_argument('--output', type=str, default='sitemap.xml', help='Output path (default: sitemap.xml)')

    def handle(self, *args, **options):
        output = Path(options['output'])
        output.parent.mkdir(parents=True, exist_ok=True)
        xml = render_sitemap()
        output.write_text(xml, encoding='utf-8')
        count = xml.count('<url>')
        self.stdout.write(self.style.SUCCESS(f'Generated sitemap.xml with {count} URLs at {output}'))
