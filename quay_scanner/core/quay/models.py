"""Data models for Quay API responses."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

SCANNED_STATUS = "scanned"


def _str(value: Any) -> str:
    return "" if value is None else str(value)


@dataclass
class TagDetail:
    """Response of the tag detail endpoint."""
    name: str = ""
    manifest_digest: str = ""
    docker_image_id: str = ""
    last_modified: str = ""
    size: int = 0
    is_manifest_list: bool = False
    start_ts: int = 0
    expiration: Optional[int] = None
    reversion: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TagDetail":
        """Build from the decoded JSON body."""
        return cls(
            name=_str(data.get("name")),
            manifest_digest=_str(data.get("manifest_digest")),
            docker_image_id=_str(data.get("docker_image_id")),
            last_modified=_str(data.get("last_modified")),
            size=data.get("size") or 0,
            is_manifest_list=bool(data.get("is_manifest_list", False)),
            start_ts=data.get("start_ts") or 0,
            expiration=data.get("expiration"),
            reversion=bool(data.get("reversion", False)),
        )


@dataclass
class Vulnerability:
    """A single known vulnerability affecting a feature."""
    name: str
    severity: str = ""
    namespace_name: str = ""
    description: str = ""
    link: str = ""
    fixed_by: str = ""
    metadata: Dict[str, Any] = field(default_factory=dict)
    # Fixed package versions, when the scanner reports them
    fixed_in: List["Feature"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Vulnerability":
        return cls(
            name=_str(data.get("Name")),
            severity=_str(data.get("Severity")),
            namespace_name=_str(data.get("NamespaceName")),
            description=_str(data.get("Description")),
            link=_str(data.get("Link")),
            fixed_by=_str(data.get("FixedBy")),
            metadata=data.get("Metadata") or {},
            fixed_in=[
                Feature.from_dict(f)
                for f in (data.get("FixedIn") or [])
                if isinstance(f, dict)
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "Name": self.name,
            "NamespaceName": self.namespace_name,
            "Description": self.description,
            "Link": self.link,
            "Severity": self.severity,
            "Metadata": self.metadata,
            "FixedBy": self.fixed_by,
        }
        if self.fixed_in:
            data["FixedIn"] = [f.to_dict() for f in self.fixed_in]
        return data


@dataclass
class Feature:
    """A package found in the image, with the vulnerabilities affecting it."""
    name: str
    version: str = ""
    version_format: str = ""
    namespace_name: str = ""
    added_by: str = ""
    vulnerabilities: List[Vulnerability] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Feature":
        return cls(
            name=_str(data.get("Name")),
            version=_str(data.get("Version")),
            version_format=_str(data.get("VersionFormat")),
            namespace_name=_str(data.get("NamespaceName")),
            added_by=_str(data.get("AddedBy")),
            vulnerabilities=[
                Vulnerability.from_dict(v)
                for v in (data.get("Vulnerabilities") or [])
                if isinstance(v, dict)
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "Version": self.version,
            "VersionFormat": self.version_format,
            "NamespaceName": self.namespace_name,
            "AddedBy": self.added_by,
            "Vulnerabilities": [v.to_dict() for v in self.vulnerabilities],
        }


@dataclass
class Layer:
    """The top layer of the scanned image, holding all features."""
    name: str = ""
    namespace_name: str = ""
    indexed_by_version: int = 0
    features: List[Feature] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Layer":
        return cls(
            name=_str(data.get("Name")),
            namespace_name=_str(data.get("NamespaceName")),
            indexed_by_version=data.get("IndexedByVersion") or 0,
            features=[
                Feature.from_dict(f)
                for f in (data.get("Features") or [])
                if isinstance(f, dict)
            ],
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "Name": self.name,
            "NamespaceName": self.namespace_name,
            "IndexedByVersion": self.indexed_by_version,
            "Features": [f.to_dict() for f in self.features],
        }


@dataclass
class SecurityData:
    layer: Layer = field(default_factory=Layer)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SecurityData":
        layer = data.get("Layer")
        return cls(layer=Layer.from_dict(layer) if isinstance(layer, dict) else Layer())

    def to_dict(self) -> Dict[str, Any]:
        return {"Layer": self.layer.to_dict()}


@dataclass
class VulnerabilityReport:
    """Result of the security endpoint.

    ``data`` is only meaningful when :attr:`is_scanned` is true; queued or
    failed scans carry an empty layer.
    """
    status: str
    data: SecurityData = field(default_factory=SecurityData)

    @property
    def is_scanned(self) -> bool:
        return self.status == SCANNED_STATUS

    @property
    def features(self) -> List[Feature]:
        return self.data.layer.features

    @property
    def vulnerability_count(self) -> int:
        return sum(len(f.vulnerabilities) for f in self.features)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VulnerabilityReport":
        security_data = data.get("data")
        return cls(
            status=_str(data.get("status")),
            data=SecurityData.from_dict(security_data) if isinstance(security_data, dict) else SecurityData(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "data": self.data.to_dict()}
