"""Schools: name is unique among active schools."""
from schooladmin.models import SchoolOut
from schooladmin.services.catalog import CatalogService


class SchoolService(CatalogService[SchoolOut]):
    entity = "School"
    key_field = "name"
    required_fields = ("name",)
