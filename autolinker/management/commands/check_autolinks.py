"""Load the keyword file and content declarations and report the result.

Useful before deploying an edited keyword file: a malformed file makes the
command fail with the same error the site would raise.
"""

from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from autolinker.engine import ConfigurationError
from autolinker.services import build_processor


class Command(BaseCommand):
    help = 'Validate the keyword link sources and report how many keywords they define.'

    def add_arguments(self, parser) -> None:
        parser.add_argument(
            '--sample',
            default='',
            help='Optional HTML snippet to run through the processor.',
        )

    def handle(self, *args, **options) -> None:
        processor = build_processor()
        try:
            processor.refresh()
        except ConfigurationError as exc:
            raise CommandError(str(exc)) from exc

        self.stdout.write(self.style.SUCCESS(f'Loaded {processor.keyword_count} keywords.'))
        if options['sample']:
            self.stdout.write(processor.process(options['sample']))
