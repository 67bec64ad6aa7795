from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from products.models import Product
from products.services.stock import record_initial_stock


PRODUCTS_DATA = [
    # sku, name, category, unit, cost, retail, medium, wholesale, stock
    ("DET-001", "Detergente Líquido 1L", "Limpieza", "Litro", "18.00", "32.00", "28.00", "25.00", 120),
    ("CLO-001", "Cloro 1L", "Limpieza", "Litro", "8.00", "15.00", "13.00", "11.00", 200),
    ("SUA-001", "Suavizante 1L", "Limpieza", "Litro", "14.00", "26.00", "23.00", "20.00", 80),
    ("DES-001", "Desengrasante 500ml", "Limpieza", "Pieza", "20.00", "38.00", "34.00", "30.00", 60),
    ("JAB-001", "Jabón de Manos 500ml", "Higiene", "Pieza", "12.00", "22.00", "19.00", "17.00", 90),
]


class Command(BaseCommand):
    help = "Seed demo products with tier prices and initial stock"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding products..."))

        created_count = 0
        for sku, name, category, unit, cost, retail, medium, wholesale, stock in PRODUCTS_DATA:
            product, created = Product.objects.get_or_create(
                sku=sku,
                defaults={
                    "name": name,
                    "category": category,
                    "unit": unit,
                    "cost": Decimal(cost),
                    "price_retail": Decimal(retail),
                    "price_medium": Decimal(medium),
                    "price_wholesale": Decimal(wholesale),
                    "stock_initial": stock,
                    "stock_current": stock,
                },
            )
            if created:
                record_initial_stock(product=product)
                created_count += 1

        self.stdout.write(
            self.style.SUCCESS(f"Products seeded (created={created_count}).")
        )
