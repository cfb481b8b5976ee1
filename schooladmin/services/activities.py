"""Activities: the code is optional; when given it is unique among active activities."""
from schooladmin.models import ActivityOut
from schooladmin.services.catalog import CatalogService


class ActivityService(CatalogService[ActivityOut]):
    entity = "Activity"
    key_field = "code"
    required_fields = ("name",)
