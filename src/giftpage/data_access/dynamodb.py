import logging
from typing import Any, Mapping

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from giftpage.core.errors import UpstreamFailure
from giftpage.data_access.record_store import Direction

logger = logging.getLogger(__name__)

# (collection, field) -> global secondary index that has `field` as hash key.
DEFAULT_INDEXES = {
    ("gifts", "stripe_payment_intent_id"): "PaymentIntentIndex",
    ("gifts", "beneficiary_id"): "BeneficiaryGiftsIndex",
}


def _is_conditional_failure(error: ClientError) -> bool:
    return error.response['Error']['Code'] == 'ConditionalCheckFailedException'


class DynamoRecordStore:
    """Single-table RecordStore: PK = "<collection>#<key>", SK = <collection>."""

    def __init__(self, table, indexes: Mapping[tuple[str, str], str] | None = None):
        self.table = table
        self.indexes = dict(DEFAULT_INDEXES if indexes is None else indexes)

    @staticmethod
    def _key(collection: str, key: str) -> dict:
        return {"PK": f"{collection}#{key}", "SK": collection}

    @staticmethod
    def _strip(item: dict | None) -> dict | None:
        if item is None:
            return None
        return {k: v for k, v in item.items() if k not in ("PK", "SK")}

    def get(self, collection: str, key: str) -> dict | None:
        try:
            response = self.table.get_item(Key=self._key(collection, key), ConsistentRead=True)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error reading {collection}/{key}: {e}")
            raise UpstreamFailure(f"Store read failed for {collection}") from e
        return self._strip(response.get("Item"))

    def put(self, collection: str, key: str, value: Mapping[str, Any]) -> bool:
        item = {**value, **self._key(collection, key)}
        try:
            self.table.put_item(
                Item=item,
                ConditionExpression="attribute_not_exists(PK)"
            )
            return True
        except ClientError as e:
            if _is_conditional_failure(e):
                logger.info(f"Record {collection}/{key} already exists")
                return False
            logger.error(f"Error writing {collection}/{key}: {e}")
            raise UpstreamFailure(f"Store write failed for {collection}") from e
        except BotoCoreError as e:
            logger.error(f"Error writing {collection}/{key}: {e}")
            raise UpstreamFailure(f"Store write failed for {collection}") from e

    def update_if_exists(
        self,
        collection: str,
        key: str,
        patch: Mapping[str, Any],
        only_if: Mapping[str, Any] | None = None,
    ) -> dict | None:
        if not patch:
            raise ValueError("patch must not be empty")

        names = {}
        values = {}
        assignments = []
        for i, (field, value) in enumerate(patch.items()):
            names[f"#f{i}"] = field
            values[f":v{i}"] = value
            assignments.append(f"#f{i} = :v{i}")

        conditions = ["attribute_exists(PK)"]
        for i, (field, expected) in enumerate((only_if or {}).items()):
            names[f"#c{i}"] = field
            values[f":c{i}"] = expected
            conditions.append(f"#c{i} = :c{i}")

        try:
            response = self.table.update_item(
                Key=self._key(collection, key),
                UpdateExpression="SET " + ", ".join(assignments),
                ConditionExpression=" AND ".join(conditions),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW"
            )
            return self._strip(response.get("Attributes", {}))
        except ClientError as e:
            if _is_conditional_failure(e):
                logger.info(f"Conditional update skipped for {collection}/{key}")
                return None
            logger.error(f"Error updating {collection}/{key}: {e}")
            raise UpstreamFailure(f"Store update failed for {collection}") from e
        except BotoCoreError as e:
            logger.error(f"Error updating {collection}/{key}: {e}")
            raise UpstreamFailure(f"Store update failed for {collection}") from e

    def query_by_equals(
        self,
        collection: str,
        field: str,
        value: Any,
        limit: int,
        order_by: str | None = None,
        direction: Direction = "desc",
        filters: Mapping[str, Any] | None = None,
    ) -> list[dict]:
        index_name = self.indexes.get((collection, field))
        if index_name is None:
            raise ValueError(f"No index registered for {collection}.{field}")

        # Ordering comes from the range key of the index (order_by).
        query_kwargs = {
            "IndexName": index_name,
            "KeyConditionExpression": Key(field).eq(value),
            "ScanIndexForward": direction == "asc",
        }

        filter_expression = Attr("SK").eq(collection)
        for name, expected in (filters or {}).items():
            filter_expression = filter_expression & Attr(name).eq(expected)
        query_kwargs["FilterExpression"] = filter_expression

        # Limit is applied before FilterExpression, so keep paging until enough
        # matching items have been collected.
        items: list[dict] = []
        try:
            while len(items) < limit:
                response = self.table.query(Limit=limit, **query_kwargs)
                items.extend(self._strip(item) for item in response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            logger.error(f"Error querying {collection} by {field}: {e}")
            raise UpstreamFailure(f"Store query failed for {collection}") from e

        return items[:limit]
