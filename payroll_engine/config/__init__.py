from .rule_table import (
    ContributionDefinition,
    ContributionType,
    PTKPStatus,
    RuleTable,
    RuleTableRegistry,
    TaxBracket,
    load_rule_tables,
    rule_table_from_dict,
    validate_brackets,
    validate_rule_table,
)
from .settings import AnnualizationPolicy, EngineSettings, WithholdingPolicy

__all__ = [
    "AnnualizationPolicy",
    "ContributionDefinition",
    "ContributionType",
    "EngineSettings",
    "PTKPStatus",
    "RuleTable",
    "RuleTableRegistry",
    "TaxBracket",
    "WithholdingPolicy",
    "load_rule_tables",
    "rule_table_from_dict",
    "validate_brackets",
    "validate_rule_table",
]
