"""Trucks: registration number is unique among active trucks."""
from schooladmin.models import TruckOut
from schooladmin.services.catalog import CatalogService


class TruckService(CatalogService[TruckOut]):
    entity = "Truck"
    key_field = "registration_number"
    required_fields = ("name", "registration_number", "status")
