"""
pulumi_auto.settings.stack — Stack settings document.

Pulumi.<stack>.yaml format:

    secretsprovider: awskms://alias/my-key
    encryptedkey: AQICAHh...
    config:
      aws:region: us-west-2
      my-project:dbPassword:
        secure: AAABAO...

Secret values are stored as {"secure": <ciphertext>} mappings and
are kept as-is; decryption is the engine's business.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pulumi_auto.settings import codec


@dataclass(frozen=True)
class StackSettings:
    """Parsed stack settings (Pulumi.<stack>.yaml)."""
    secrets_provider: str | None = None
    encrypted_key: str | None = None
    encryption_salt: str | None = None
    config: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StackSettings:
        """Build from a parsed mapping.

        Raises:
            ValueError: Wrongly typed field
        """
        config = data.get("config") or {}
        if not isinstance(config, dict):
            raise ValueError("'config' must be a mapping")

        for key in ("secretsprovider", "encryptedkey", "encryptionsalt"):
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ValueError(f"'{key}' must be a string")

        return cls(
            secrets_provider=data.get("secretsprovider"),
            encrypted_key=data.get("encryptedkey"),
            encryption_salt=data.get("encryptionsalt"),
            config=dict(config),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.secrets_provider is not None:
            data["secretsprovider"] = self.secrets_provider
        if self.encrypted_key is not None:
            data["encryptedkey"] = self.encrypted_key
        if self.encryption_salt is not None:
            data["encryptionsalt"] = self.encryption_salt
        if self.config:
            data["config"] = dict(self.config)
        return data

    @classmethod
    def from_yaml(cls, text: str) -> StackSettings:
        return cls.from_dict(codec.decode(text, ".yaml"))

    @classmethod
    def from_json(cls, text: str) -> StackSettings:
        return cls.from_dict(codec.decode(text, ".json"))

    def to_yaml(self) -> str:
        return codec.encode(self.to_dict(), ".yaml")

    def to_json(self) -> str:
        return codec.encode(self.to_dict(), ".json")
