from dataclasses import dataclass


@dataclass
class TableOptions:
    """
    Describes a DynamoDB table laid out as an ordered key-value store.

    Each partition (pk_name) is one ordered range. The sort key (sk_name) must be
    of binary type ("B") so that DynamoDB orders it by unsigned bytes, and the
    record value lives in a binary attribute (value_name).
    """

    table_name: str
    pk_name: str = "pk"
    sk_name: str = "sk"
    value_name: str = "value"
    region: str = "us-east-1"
    consistent_read: bool = False

    def projection(self) -> str:
        """ProjectionExpression fetching only the key and value attributes."""
        return "#sk, #val"

    def attribute_names(self) -> dict[str, str]:
        """ExpressionAttributeNames shared by every cursor query."""
        return {"#pk": self.pk_name, "#sk": self.sk_name, "#val": self.value_name}
