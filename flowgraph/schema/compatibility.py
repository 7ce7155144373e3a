"""Structural compatibility between a producer's output and a consumer's input.

Rules:
1. If either schema is unresolved the status is ``unknown``.
2. Every property the consumer requires must exist in the producer.
3. Kinds of shared properties must match, or be a safe coercion.
4. Extra producer properties are fine (subset consumption is safe).
5. Imprecise producer shapes (unknown, null) are warnings, not errors.
6. Problems beneath a property the consumer does not require are
   downgraded to warnings.
"""

from flowgraph.models.schema import (
    ArraySchema,
    NullSchema,
    ObjectSchema,
    Schema,
    SchemaKind,
    StringSchema,
    UnknownSchema,
)
from flowgraph.models.validation import (
    CompatibilityIssue,
    CompatibilityResult,
    CompatibilityStatus,
    IssueSeverity,
    IssueType,
)

# (producer kind, consumer kind) pairs that convert without loss
_SAFE_COERCIONS = frozenset({("number", "string"), ("boolean", "string")})


def check_compatibility(
    producer: Schema | None,
    consumer: Schema | None,
) -> CompatibilityResult:
    """Check whether data shaped like producer can be consumed as consumer."""
    if producer is None or consumer is None:
        return CompatibilityResult(
            status=CompatibilityStatus.unknown,
            source_schema=producer,
            target_schema=consumer,
        )

    issues: list[CompatibilityIssue] = []
    _compare(producer, consumer, "", True, issues)
    return CompatibilityResult(
        status=status_for_issues(issues),
        issues=issues,
        source_schema=producer,
        target_schema=consumer,
    )


def status_for_issues(issues: list[CompatibilityIssue]) -> CompatibilityStatus:
    """The worst severity among issues: error > warning > compatible."""
    if any(issue.severity == IssueSeverity.error for issue in issues):
        return CompatibilityStatus.error
    if issues:
        return CompatibilityStatus.warning
    return CompatibilityStatus.compatible


def _join(path: str, name: str) -> str:
    return f"{path}.{name}" if path else name


def _label(path: str) -> str:
    return f"'{path}'" if path else "output"


def _severity(strict: bool) -> IssueSeverity:
    return IssueSeverity.error if strict else IssueSeverity.warning


def _compare(
    producer: Schema,
    consumer: Schema,
    path: str,
    strict: bool,
    issues: list[CompatibilityIssue],
) -> None:
    if isinstance(consumer, UnknownSchema):
        return

    if isinstance(producer, UnknownSchema):
        issues.append(
            CompatibilityIssue(
                type=IssueType.imprecise_type,
                severity=IssueSeverity.warning,
                path=path,
                message=f"{_label(path)} has an unknown type in source, expected {consumer.kind}",
                source_value=SchemaKind.unknown.value,
                target_value=consumer.kind,
            )
        )
        return

    if isinstance(producer, NullSchema) and not isinstance(consumer, NullSchema):
        issues.append(
            CompatibilityIssue(
                type=IssueType.imprecise_type,
                severity=IssueSeverity.warning,
                path=path,
                message=f"{_label(path)} may be null in source, expected {consumer.kind}",
                source_value=SchemaKind.null.value,
                target_value=consumer.kind,
            )
        )
        return

    if isinstance(consumer, ObjectSchema):
        _compare_object(producer, consumer, path, strict, issues)
        return

    if isinstance(consumer, ArraySchema):
        if not isinstance(producer, ArraySchema):
            issues.append(_kind_mismatch(producer, consumer, path, _severity(strict)))
            return
        _compare(producer.items, consumer.items, f"{path}[]", strict, issues)
        return

    # primitive consumer
    if producer.kind == consumer.kind:
        if isinstance(producer, StringSchema) and isinstance(consumer, StringSchema):
            _compare_format(producer, consumer, path, issues)
        return
    if (producer.kind, consumer.kind) in _SAFE_COERCIONS:
        return
    issues.append(_kind_mismatch(producer, consumer, path, _severity(strict)))


def _compare_object(
    producer: Schema,
    consumer: ObjectSchema,
    path: str,
    strict: bool,
    issues: list[CompatibilityIssue],
) -> None:
    if not isinstance(producer, ObjectSchema):
        # a consumer that requires nothing can still cope with other shapes
        issues.append(
            _kind_mismatch(producer, consumer, path, _severity(strict and bool(consumer.required)))
        )
        return

    for name in consumer.required:
        if name not in producer.properties:
            field_path = _join(path, name)
            issues.append(
                CompatibilityIssue(
                    type=IssueType.missing_field,
                    severity=_severity(strict),
                    path=field_path,
                    message=f"Required field '{field_path}' is missing from source output",
                )
            )

    for name, target_field in consumer.properties.items():
        source_field = producer.properties.get(name)
        if source_field is None:
            continue
        _compare(
            source_field,
            target_field,
            _join(path, name),
            strict and name in consumer.required,
            issues,
        )


def _compare_format(
    producer: StringSchema,
    consumer: StringSchema,
    path: str,
    issues: list[CompatibilityIssue],
) -> None:
    if consumer.format and producer.format and producer.format != consumer.format:
        issues.append(
            CompatibilityIssue(
                type=IssueType.format_mismatch,
                severity=IssueSeverity.warning,
                path=path,
                message=(
                    f"Format mismatch: {_label(path)} has format '{producer.format}' "
                    f"in source, expected '{consumer.format}'"
                ),
                source_value=producer.format,
                target_value=consumer.format,
            )
        )


def _kind_mismatch(
    producer: Schema,
    consumer: Schema,
    path: str,
    severity: IssueSeverity,
) -> CompatibilityIssue:
    return CompatibilityIssue(
        type=IssueType.type_mismatch,
        severity=severity,
        path=path,
        message=f"Type mismatch: {_label(path)} is {producer.kind} in source, expected {consumer.kind}",
        source_value=producer.kind,
        target_value=consumer.kind,
    )
