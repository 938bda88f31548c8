import json
from pathlib import Path

from django.core.management.base import BaseCommand

from craftstudio.seo.openapi import build_openapi_schema


class Command(BaseCommand):
    help = 'Write the OpenAPI document to a file'

    def add_arguments(self, parser):
        parser.add_argument('--output', type=str, default='openapi.json', help='Output path (default: openapi.json)')

    def handle(self, *args, **options):
        output = Path(options['output'])
        output.parent.mkdir(parents=True, exist_ok=True)
        schema = build_openapi_schema()
        output.write_text(json.dumps(schema, indent=2, default=str), encoding='utf-8')
        self.stdout.write(self.style.SUCCESS(f"Wrote OpenAPI spec with {len(schema.get('paths', {}))} paths to {output}"))
