from dataclasses import dataclass


@dataclass(frozen=True)
class PurchaseConfig:

    default_target_currency: str = "BRL"
    description_max_length: int = 50
    idempotency_key_max_length: int = 255

    @classmethod
    def from_dict(cls, values: dict) -> "PurchaseConfig":
        defaults = cls()
        return cls(
            default_target_currency=values.get(
                "DEFAULT_TARGET_CURRENCY", defaults.default_target_currency
            ).upper(),
            description_max_length=int(values.get("DESCRIPTION_MAX_LENGTH", defaults.description_max_length)),
            idempotency_key_max_length=int(
                values.get("IDEMPOTENCY_KEY_MAX_LENGTH", defaults.idempotency_key_max_length)
            ),
        )
