"""Compile a GraphQL document into a prototype.

The prototype is the nested description of every requested field, annotated
with the metadata caching needs (type, alias, arguments, identifier). The
same pass decides whether the operation can be cached at all.

graphql-core's ``visit`` calls flat enter/leave handlers per node kind. The
nesting is rebuilt with an explicit path stack: field enter pushes the
response key, field leave pops it, and selection-set enter writes its node
at the path the stack describes.

Any of these downgrades the operation to INELIGIBLE and stops the walk:

- a directive on any node (response shape decided at execution time)
- a subscription
- an introspection field (``__schema``, ``__typename``, ...)
- a variable used as an argument value (no literal to key on)
- a relation whose selection set has no identifier field
- an inline fragment (shape depends on the runtime type)
"""

from __future__ import annotations

from typing import Any

from graphql.error import GraphQLSyntaxError
from graphql.language import (
    BREAK,
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    ListValueNode,
    Node,
    NullValueNode,
    ObjectValueNode,
    OperationDefinitionNode,
    SelectionSetNode,
    ValueNode,
    VariableNode,
    Visitor,
    parse,
    visit,
)
from graphql.utilities import value_from_ast_untyped

from quell.config.constants import (
    IDENTIFIER_NAMES,
    META_ALIAS,
    META_ARGS,
    META_ID,
    META_TYPE,
    RESERVED_PREFIX,
)
from quell.core.errors import QueryParseError
from quell.core.logging import get_logger
from quell.prototype.models import (
    OperationKind,
    ParseResult,
    ProtoNode,
    has_identifier,
)

log = get_logger(__name__)


def _contains_variable(value: ValueNode) -> bool:
    if isinstance(value, VariableNode):
        return True
    if isinstance(value, ListValueNode):
        return any(_contains_variable(v) for v in value.values or ())
    if isinstance(value, ObjectValueNode):
        return any(_contains_variable(f.value) for f in value.fields or ())
    return False


def _literal(value: ValueNode) -> Any:
    """Argument value as written. Scalars keep the parser's raw string."""
    if isinstance(value, NullValueNode):
        return None
    if isinstance(value, (ListValueNode, ObjectValueNode)):
        return value_from_ast_untyped(value)
    return getattr(value, "value", None)


def _response_key(node: FieldNode) -> str:
    return node.alias.value if node.alias else node.name.value


class PrototypeBuilder(Visitor):
    """Visitor that fills a ParseResult. Use once per document."""

    def __init__(self, user_defined_id: str | None = None) -> None:
        super().__init__()
        self.user_defined_id = user_defined_id
        self.result = ParseResult()
        self._stack: list[str] = []
        self._meta: dict[tuple[str, ...], ProtoNode] = {}
        self._target: dict[str, Any] = self.result.prototype

    def _downgrade(self, reason: str) -> bool:
        self.result.operation_kind = OperationKind.INELIGIBLE
        self.result.ineligible_reason = reason
        log.debug("operation_ineligible", reason=reason, path=".".join(self._stack))
        return BREAK

    def _directive_check(self, node: Node) -> bool | None:
        if getattr(node, "directives", None):
            return self._downgrade("directive")
        return None

    def enter(self, node: Node, *_args: Any) -> bool | None:
        return self._directive_check(node)

    def enter_operation_definition(self, node: OperationDefinitionNode, *_args: Any) -> bool | None:
        if self._directive_check(node):
            return BREAK
        self._target = self.result.prototype
        self.result.operation_kind = OperationKind(node.operation.value)
        if self.result.operation_kind is OperationKind.SUBSCRIPTION:
            return self._downgrade("subscription")
        return None

    def enter_fragment_definition(self, node: FragmentDefinitionNode, *_args: Any) -> bool | None:
        if self._directive_check(node):
            return BREAK
        name = node.name.value
        self._stack.append(name)
        self._target = self.result.fragments
        self._target[name] = {
            _response_key(sel): True
            for sel in node.selection_set.selections or ()
            if isinstance(sel, FieldNode) and sel.selection_set is None
        }
        return None

    def leave_fragment_definition(self, *_args: Any) -> None:
        self._stack.pop()

    def enter_inline_fragment(self, node: InlineFragmentNode, *_args: Any) -> bool:
        return self._downgrade("inline_fragment")

    def enter_field(self, node: FieldNode, *_args: Any) -> bool | None:
        if self._directive_check(node):
            return BREAK
        name = node.name.value
        if name.startswith(RESERVED_PREFIX):
            return self._downgrade("introspection")

        args: dict[str, Any] = {}
        meta: ProtoNode = {META_ID: None}
        for arg in node.arguments or ():
            if _contains_variable(arg.value):
                return self._downgrade("variable_argument")
            key = arg.name.value
            value = _literal(arg.value)
            if key.startswith(RESERVED_PREFIX):
                # type-specific option, kept on the node but never cached
                meta[key] = value
            else:
                args[key] = value
        meta[META_ID] = self._identifier_from(args)

        response_key = _response_key(node)
        meta[META_TYPE] = name.lower()
        meta[META_ALIAS] = node.alias.value if node.alias else None
        meta[META_ARGS] = args or None

        self._stack.append(response_key)
        self._meta[tuple(self._stack)] = meta
        return None

    def leave_field(self, *_args: Any) -> None:
        self._stack.pop()

    def enter_selection_set(
        self, node: SelectionSetNode, _key: Any, parent: Any, *_args: Any
    ) -> bool | None:
        # Operation and fragment selection sets hold no field metadata
        if not isinstance(parent, FieldNode):
            return None

        fields: ProtoNode = {}
        for selection in node.selections or ():
            if isinstance(selection, FieldNode) and selection.selection_set is None:
                fields[_response_key(selection)] = True
            elif isinstance(selection, FragmentSpreadNode):
                # placeholder replaced by expand_fragments()
                fields[selection.name.value] = True

        if not has_identifier(fields, self.user_defined_id):
            return self._downgrade("missing_identifier")

        path = tuple(self._stack)
        record = {**fields, **self._meta.get(path, {})}
        self._write(path, record)
        return None

    def _identifier_from(self, args: dict[str, Any]) -> Any:
        if self.user_defined_id and self.user_defined_id in args:
            return args[self.user_defined_id]
        for name in IDENTIFIER_NAMES:
            if name in args:
                return args[name]
        return None

    def _write(self, path: tuple[str, ...], record: ProtoNode) -> None:
        cursor = self._target
        for key in path[:-1]:
            if not isinstance(cursor.get(key), dict):
                cursor[key] = {}
            cursor = cursor[key]
        cursor[path[-1]] = record


def parse_ast(document: DocumentNode, user_defined_id: str | None = None) -> ParseResult:
    """Build the prototype, operation kind and fragment map for a document.

    Never raises for a document the parser accepted. When the operation is
    downgraded the prototype may be incomplete and must not be used.
    """
    builder = PrototypeBuilder(user_defined_id=user_defined_id)
    visit(document, builder)
    return builder.result


def parse_query(query: str, user_defined_id: str | None = None) -> ParseResult:
    """Parse query text with graphql-core and compile it.

    Raises:
        QueryParseError: The text is not a valid GraphQL document.
    """
    try:
        document = parse(query)
    except GraphQLSyntaxError as e:
        locations = [(loc.line, loc.column) for loc in e.locations or []]
        raise QueryParseError.syntax_error(e.message, locations) from e
    return parse_ast(document, user_defined_id=user_defined_id)
