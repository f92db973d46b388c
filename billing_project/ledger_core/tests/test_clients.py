from django.core.exceptions import ValidationError
from django.test import TestCase

from ..exceptions import InvalidStateError, NotFoundError
from ..models import Client, Station
from ..services import (create_client, deactivate_client, delete_client,
                        get_client, get_station, update_client, update_station)
from .helpers import LedgerTestMixin


class ClientServiceTests(LedgerTestMixin, TestCase):
    def test_create_strips_and_normalizes(self):
        client = create_client("  Kwara Foods Ltd ", " 5 Taiwo Road ", email="Accounts@KF.example")
        self.assertEqual(client.company_name, "Kwara Foods Ltd")
        self.assertEqual(client.address, "5 Taiwo Road")
        self.assertEqual(client.email, "accounts@kf.example")
        self.assertTrue(client.is_active)

    def test_name_and_address_are_required(self):
        with self.assertRaises(ValidationError):
            create_client("", "5 Taiwo Road")
        with self.assertRaises(ValidationError):
            create_client("Kwara Foods Ltd", "   ")

    def test_company_name_is_unique_ignoring_case(self):
        create_client("Kwara Foods Ltd", "5 Taiwo Road")
        with self.assertRaises(ValidationError):
            create_client("KWARA FOODS LTD", "Elsewhere")
        self.assertEqual(Client.objects.count(), 1)

    def test_update(self):
        client = self.make_client()
        other = self.make_client(name="Harmony Stores")

        updated = update_client(client.pk, phone="08031234567")
        self.assertEqual(updated.phone, "08031234567")

        with self.assertRaises(ValidationError):
            update_client(client.pk, company_name="harmony stores")
        with self.assertRaises(ValidationError):
            update_client(client.pk, total_paid="0")
        with self.assertRaises(NotFoundError):
            update_client(999999, phone="1")
        self.assertEqual(Client.objects.get(pk=other.pk).company_name, "Harmony Stores")

    def test_invoiced_client_is_deactivated_not_deleted(self):
        client = self.make_client()
        self.make_invoice(client=client)

        with self.assertRaises(InvalidStateError):
            delete_client(client.pk)

        deactivate_client(client.pk)
        self.assertFalse(get_client(client.pk).is_active)
        self.assertFalse(Client.objects.active().filter(pk=client.pk).exists())

    def test_uninvoiced_client_can_be_deleted(self):
        client = self.make_client()
        delete_client(client.pk)
        with self.assertRaises(NotFoundError):
            get_client(client.pk)

    def test_search_only_returns_active_matches(self):
        self.make_client(name="Kwara Foods Ltd")
        gone = self.make_client(name="Kwara Textiles")
        self.make_client(name="Harmony Stores")
        deactivate_client(gone.pk)

        names = list(Client.objects.search("kwara").values_list("company_name", flat=True))
        self.assertEqual(names, ["Kwara Foods Ltd"])


class StationTests(TestCase):
    def test_singleton_is_created_from_settings(self):
        station = get_station()
        self.assertEqual(station.pk, Station.SINGLETON_PK)
        self.assertEqual(station.invoice_prefix, "EFM/ADV/")
        self.assertEqual(get_station().pk, station.pk)
        self.assertEqual(Station.objects.count(), 1)

    def test_update_station(self):
        station = update_station(name="Emirate FM", phone="08030000000")
        self.assertEqual(station.name, "Emirate FM")
        self.assertEqual(Station.load().phone, "08030000000")

    def test_invalid_updates(self):
        with self.assertRaises(ValidationError):
            update_station(receipt_counter=10)
        with self.assertRaises(ValidationError):
            update_station(logo_url="not a url")
        with self.assertRaises(ValidationError):
            update_station(name="")

    def test_station_cannot_be_deleted(self):
        with self.assertRaises(ValidationError):
            get_station().delete()
        self.assertEqual(Station.objects.count(), 1)
