"""Service-independent building blocks shared by the backends."""

from svcctl.services.config import ConfigService, load_config
from svcctl.services.definition import parse_definition_file, parse_definition_lines
from svcctl.services.details import detail_from_definition, display_name_for
from svcctl.services.enumeration import ServiceNameCollection, collect_service_names

__all__ = [
    "ConfigService",
    "ServiceNameCollection",
    "collect_service_names",
    "detail_from_definition",
    "display_name_for",
    "load_config",
    "parse_definition_file",
    "parse_definition_lines",
]
