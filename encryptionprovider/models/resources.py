"""Group-resource and cached secret data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class GroupResource:
    """An API resource kind identified by its API group and resource name.

    The canonical string form is ``resource`` for the core (empty) group and
    ``resource.group`` otherwise, e.g. ``oauthaccesstokens.oauth.openshift.io``.
    """

    group: str
    resource: str

    def __str__(self) -> str:
        if not self.group:
            return self.resource
        return f"{self.resource}.{self.group}"

    @classmethod
    def parse(cls, text: str) -> GroupResource:
        """Parse the canonical ``resource[.group]`` form.

        Raises:
            ValueError: if *text* is empty or has no resource part.
        """
        value = text.strip()
        if not value:
            raise ValueError("group-resource must not be empty")
        resource, _, group = value.partition(".")
        if not resource:
            raise ValueError(f"Invalid group-resource: {text!r}")
        return cls(group=group, resource=resource)


@dataclass(frozen=True)
class CachedSecret:
    """Metadata-only view of a Secret held by the SecretCache.

    Secret payload (``data``/``stringData``) is never retained; the
    coordination protocol only looks at existence and annotations.
    """

    namespace: str
    name: str
    annotations: dict[str, str] = field(default_factory=dict)
    resource_version: str = ""

    # annotations is a dict, so instances compare by value but are not hashable.
    __hash__ = None  # type: ignore[assignment]

    def has_annotation(self, key: str) -> bool:
        return key in self.annotations
