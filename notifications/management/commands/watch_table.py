from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from notifications.bus import NOTIFICATION_ADDED, EventBus
from notifications.cache import FileBackend, NotificationCache
from notifications.client import ApiError, EmenuClient
from notifications.poller import NotificationPoller


class Command(BaseCommand):
    help = "Poll the E-Menu API for one table and print customer notifications"

    def add_arguments(self, parser):
        parser.add_argument("table_number")
        parser.add_argument("--api-url", default=settings.EMENU_API_URL)
        parser.add_argument("--interval", type=float, default=settings.EMENU_POLL_INTERVAL)
        parser.add_argument("--cache-dir", default=settings.EMENU_CACHE_DIR)
        parser.add_argument(
            "--once",
            action="store_true",
            help="Run a single poll and exit",
        )

    def handle(self, *args, **options):
        table_number = options["table_number"]

        client = EmenuClient(options["api_url"])
        bus = EventBus()
        cache = NotificationCache(FileBackend(options["cache_dir"]))

        poller = NotificationPoller(
            table_number,
            client,
            cache=cache,
            bus=bus,
            interval=options["interval"],
        )

        if options["once"]:
            try:
                poller.poll_once()
            except ApiError as exc:
                raise CommandError(exc.message)

            for notification in poller.notifications:
                self.print_notification(table_number, notification)
            return

        bus.subscribe(NOTIFICATION_ADDED, self.print_notification)
        self.stdout.write(
            f"Watching table {table_number} at {options['api_url']} "
            f"every {options['interval']}s (Ctrl+C to stop)"
        )
        try:
            poller.run()
        except KeyboardInterrupt:
            self.stdout.write("\nStopped")
        finally:
            poller.close()

    def print_notification(self, table_number, notification, **kwargs):
        line = f"[{notification.timestamp}] {notification.sender}: {notification.content}"
        if notification.sender == "restaurant":
            line = self.style.SUCCESS(line)
        self.stdout.write(line)
