import logging
import time

from django.core.management.base import BaseCommand, CommandError
from django.db import connections

from dashboard import boards
from dashboard.polling import BoardSnapshot, FetchFailed, OrderPoller, call_with_retry

logger = logging.getLogger(__name__)


def fetch_board(board):
    try:
        if board == 'kasir':
            orders = boards.kasir_orders()
        else:
            orders = boards.kitchen_orders()
        return [{'id': order.id, 'status': order.status, 'customer_name': order.customer_name}
                for order in orders]
    finally:
        # Fetches run on worker threads, each with its own connection
        connections.close_all()


class Command(BaseCommand):
    help = "Poll the cashier or kitchen board and log new orders and status changes"

    def add_arguments(self, parser):
        parser.add_argument('--board', choices=['kasir', 'kitchen'], default='kasir')
        parser.add_argument('--interval', type=float, default=None,
                            help="Seconds between polls (default: ORDER_POLL_INTERVAL)")
        parser.add_argument('--once', action='store_true', help="Fetch once and exit")

    def handle(self, *args, **options):
        board = options['board']
        self.previous = None

        if options['once']:
            try:
                orders = call_with_retry(lambda: fetch_board(board))
            except FetchFailed as e:
                raise CommandError(str(e))
            self.report(orders)
            return

        poller = OrderPoller(lambda: fetch_board(board), self.report, interval=options['interval'])
        self.stdout.write(f"Watching {board} board, Ctrl+C to stop")
        with poller:
            try:
                while True:
                    time.sleep(1)
            except KeyboardInterrupt:
                pass
        self.stdout.write("Stopped")

    def report(self, orders):
        snapshot = BoardSnapshot(orders)
        arrived, changed, gone = snapshot.diff(self.previous)
        if self.previous is None:
            self.stdout.write(f"{len(snapshot)} order(s) on the board")
        else:
            for order_id in arrived:
                self.stdout.write(self.style.SUCCESS(f"New order {order_id}"))
            for order_id, old, new in changed:
                self.stdout.write(f"Order {order_id}: {old} -> {new}")
            for order_id in gone:
                self.stdout.write(f"Order {order_id} left the board")
        logger.debug("Board poll: %d arrived, %d changed, %d gone", len(arrived), len(changed), len(gone))
        self.previous = snapshot
