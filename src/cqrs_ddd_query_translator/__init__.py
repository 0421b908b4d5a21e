from .compiler import compile_field_filter, compile_search
from .exceptions import (
    QueryTranslatorError,
    UnknownFamilyError,
    UnsupportedPredicateError,
)
from .families import (
    DEFAULT_FAMILIES,
    ConditionName,
    FamilyRegistry,
    ScalarFamily,
    build_default_families,
)
from .logger import LogContext, QueryLogger
from .ports import IQueryBackend
from .predicates import (
    Combinator,
    Comparison,
    FieldRef,
    Predicate,
    PredicateOperator,
    and_,
    eq,
    exists,
    ilike,
    in_,
    or_,
)
from .translator import Page, QueryTranslator
from .types import (
    BigIntType,
    Conditions,
    ContainsCondition,
    DateType,
    EqCondition,
    ExistsCondition,
    FieldFilter,
    IDType,
    InCondition,
    NumberType,
    Operator,
    Order,
    OrderDirection,
    Pager,
    SearchField,
    StringType,
)
from .utils import cast_value

__all__ = [
    # Translator
    "QueryTranslator",
    "Page",
    "IQueryBackend",
    # Descriptors
    "Order",
    "OrderDirection",
    "Pager",
    "SearchField",
    "Operator",
    "Conditions",
    "EqCondition",
    "InCondition",
    "ExistsCondition",
    "ContainsCondition",
    "FieldFilter",
    "IDType",
    "DateType",
    "StringType",
    "NumberType",
    "BigIntType",
    # Predicates
    "Predicate",
    "PredicateOperator",
    "Comparison",
    "Combinator",
    "FieldRef",
    "eq",
    "in_",
    "exists",
    "ilike",
    "and_",
    "or_",
    # Compilation
    "ScalarFamily",
    "FamilyRegistry",
    "ConditionName",
    "DEFAULT_FAMILIES",
    "build_default_families",
    "compile_field_filter",
    "compile_search",
    # Logging
    "QueryLogger",
    "LogContext",
    # Exceptions
    "QueryTranslatorError",
    "UnknownFamilyError",
    "UnsupportedPredicateError",
    # Utilities
    "cast_value",
]
