"""Type-dispatched parameter binding.

Each supported parameter kind has one binding strategy. The table is built
once per binder and is read-only afterwards, so a binder can be shared
between threads.
"""

import enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Sequence

from .exceptions import UnsupportedParameterTypeError
from .statement import PreparedStatement

BindingStrategy = Callable[[int, PreparedStatement, Any], PreparedStatement]


class ParamKind(enum.Enum):
    """Closed set of parameter kinds that can be bound to a statement."""

    INTEGER = "integer"
    TEXT = "text"
    FLOAT = "float"
    BOOLEAN = "boolean"


# Exact-type lookup: bool is a subclass of int and must not bind as INTEGER.
_KIND_BY_TYPE: Mapping[type, ParamKind] = MappingProxyType(
    {
        int: ParamKind.INTEGER,
        str: ParamKind.TEXT,
        float: ParamKind.FLOAT,
        bool: ParamKind.BOOLEAN,
    }
)


class ParameterBinder:
    """Bind values to positional placeholders according to their kind."""

    def __init__(self) -> None:
        self._strategies: Mapping[ParamKind, BindingStrategy] = MappingProxyType(
            {
                ParamKind.INTEGER: lambda index, ps, value: ps.set_int(index, value),
                ParamKind.TEXT: lambda index, ps, value: ps.set_string(index, value),
                ParamKind.FLOAT: lambda index, ps, value: ps.set_float(index, value),
                ParamKind.BOOLEAN: lambda index, ps, value: ps.set_bool(index, value),
            }
        )

    @property
    def strategies(self) -> Mapping[ParamKind, BindingStrategy]:
        """Read-only view of the dispatch table."""
        return self._strategies

    @staticmethod
    def kind_of(value: object) -> ParamKind:
        """Return the kind of ``value``.

        Raises:
            UnsupportedParameterTypeError: If ``value`` is None or of a type
                with no binding strategy.
        """
        if value is None:
            raise UnsupportedParameterTypeError("Cannot bind None; parameters must not be null")
        kind = _KIND_BY_TYPE.get(type(value))
        if kind is None:
            raise UnsupportedParameterTypeError(
                f"No binding strategy for parameter of type {type(value).__name__}"
            )
        return kind

    def bind(self, position: int, statement: PreparedStatement, value: object) -> PreparedStatement:
        """Bind ``value`` at 1-based ``position`` using the strategy for its kind."""
        return self._strategies[self.kind_of(value)](position, statement, value)

    def bind_all(self, statement: PreparedStatement, params: Sequence[object]) -> PreparedStatement:
        """Bind ``params`` in declaration order to placeholders 1..n."""
        for index, value in enumerate(params):
            self.bind(index + 1, statement, value)
        return statement
