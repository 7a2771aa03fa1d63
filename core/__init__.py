"""Core shared contracts and utilities."""

from core.id_contract import (
    ENTITY_KINDS,
    IdAllocator,
    create_entity_id,
    is_setter_id,
    make_setter_id,
    parse_entity_id,
    state_id_from_setter,
)
from core.structured_logging import (
    configure_structured_logging,
    get_phase,
    get_run_id,
    get_source,
    phase_scope,
    set_run_id,
    source_scope,
    with_current_context,
)
from core.config_loader import (
    ConfigValidationError,
    ExtractorConfig,
    config_from_dict,
    load_extractor_config,
    resolve_strict_config_validation,
)
from core.run_artifacts import write_graph_json, write_run_report

__all__ = [
    "ENTITY_KINDS",
    "IdAllocator",
    "create_entity_id",
    "is_setter_id",
    "make_setter_id",
    "parse_entity_id",
    "state_id_from_setter",
    "configure_structured_logging",
    "get_phase",
    "get_run_id",
    "get_source",
    "phase_scope",
    "set_run_id",
    "source_scope",
    "with_current_context",
    "ConfigValidationError",
    "ExtractorConfig",
    "config_from_dict",
    "load_extractor_config",
    "resolve_strict_config_validation",
    "write_graph_json",
    "write_run_report",
]
