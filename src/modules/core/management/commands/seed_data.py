from __future__ import annotations

import random
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.utils import timezone

from modules.accounts.dtos import Principal, RoleEnum
from modules.accounts.repositories import PrivilegedProfileLookup
from modules.accounts.services import build_account_service
from modules.core.exceptions import Conflict
from modules.orders.constants import OrderStatus
from modules.orders.services import build_order_service

SEED_ACCOUNTS = [
    ("admin@dccakes.example.com", "admin123", "admin", RoleEnum.ADMIN),
    ("staff@dccakes.example.com", "staff123", "staff", RoleEnum.VIEWER),
]

SEED_ORDERS = [
    ("Jane Doe", "2kg vanilla cake with strawberry filling", "Downtown"),
    ("Carlos Silva", "Chocolate drip cake, 20 slices", "North Side"),
    ("Amelia Brooks", "Dozen red velvet cupcakes", "Harbor"),
    ("Noah Patel", "Three-tier wedding cake, lemon and elderflower", "Old Town"),
    ("Lucia Moreno", "Carrot cake with cream cheese frosting", "Downtown"),
    ("Ethan Wright", "Birthday cake shaped as a football", "West End"),
    ("Grace Kim", "Matcha roll cake", "University"),
    ("Omar Haddad", "Pistachio baklava cheesecake", "Harbor"),
]


class Command(BaseCommand):
    help = "Seed database with an admin, a viewer and sample orders."

    def add_arguments(self, parser):
        parser.add_argument(
            "--orders", type=int, default=len(SEED_ORDERS), help="Number of orders to create."
        )

    def handle(self, *args, **options):
        random.seed(42)
        self.stdout.write("Seeding development data...")

        accounts_created = self._seed_accounts()
        orders_created = self._seed_orders(options["orders"])

        self.stdout.write(
            self.style.SUCCESS(
                f"Seed completed: accounts={accounts_created}, orders={orders_created}"
            )
        )

    def _seed_accounts(self) -> int:
        self.stdout.write("Creating accounts...")
        service = build_account_service()
        created = 0
        for email, password, username, role in SEED_ACCOUNTS:
            payload = {"email": email, "password": password, "username": username}
            register = (
                service.register_admin if role == RoleEnum.ADMIN else service.register_viewer
            )
            try:
                register(payload)
            except Conflict:
                self.stdout.write(f"  {username} already exists, skipping.")
                continue
            created += 1
        self.stdout.write(self.style.SUCCESS("Creating accounts... Done!"))
        return created

    def _seed_orders(self, count: int) -> int:
        self.stdout.write("Creating orders...")
        admin = PrivilegedProfileLookup().get_by_username("admin")
        if admin is None:
            self.stdout.write(self.style.WARNING("Skipping orders (no admin profile)."))
            return 0

        principal = Principal(identity_id=admin.identity_id, role=RoleEnum.ADMIN)
        service = build_order_service()
        statuses = [choice for choice, _ in OrderStatus.choices]

        for i in range(count):
            customer_name, details, location = SEED_ORDERS[i % len(SEED_ORDERS)]
            order = service.create_order(
                principal,
                {
                    "customer_name": customer_name,
                    "order_details": details,
                    "location": location,
                    "phone_number": f"+1555010{i:04d}",
                    "pickup_date": timezone.localdate() + timedelta(days=random.randint(1, 21)),
                },
            )
            status = random.choice(statuses)
            if status != OrderStatus.INCOMING:
                service.update_order(principal, str(order.id), {"status": status})

        self.stdout.write(self.style.SUCCESS("Creating orders... Done!"))
        return count
