import logging
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from boto3.dynamodb.conditions import Attr, Key
from botocore.exceptions import BotoCoreError, ClientError

from finance_dashboard.core.errors import StoreUnavailableError
from finance_dashboard.db.base import CategoryStore, TransactionQuery, TransactionStore
from finance_dashboard.utils.dates import format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

TIMESTAMP_FIELDS = ("date", "created_at", "updated_at")

# Tables are keyed on user_id (partition) + id (sort)


def _store_error(operation: str, error: Exception) -> StoreUnavailableError:
    if isinstance(error, ClientError):
        message = error.response.get("Error", {}).get("Message", str(error))
    else:
        message = str(error)
    logger.error(f"{operation} failed: {message}")
    return StoreUnavailableError(f"Database error during {operation}")


class _DynamoTable:
    """Shared item plumbing for a user-partitioned DynamoDB table."""

    def __init__(self, table):
        self._table = table

    def _query_user(self, user_id: str, filter_expression=None) -> List[Dict[str, Any]]:
        kwargs: Dict[str, Any] = {"KeyConditionExpression": Key("user_id").eq(user_id)}
        if filter_expression is not None:
            kwargs["FilterExpression"] = filter_expression

        items: List[Dict[str, Any]] = []
        try:
            while True:
                response = self._table.query(**kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                kwargs["ExclusiveStartKey"] = last_key
        except (ClientError, BotoCoreError) as e:
            raise _store_error("query", e)
        return [_from_item(item) for item in items]

    def _get(self, user_id: str, item_id: str) -> Optional[Dict[str, Any]]:
        try:
            response = self._table.get_item(Key={"user_id": user_id, "id": item_id})
        except (ClientError, BotoCoreError) as e:
            raise _store_error("get_item", e)
        item = response.get("Item")
        return _from_item(item) if item else None

    def _put(self, record: Dict[str, Any]) -> Dict[str, Any]:
        try:
            self._table.put_item(Item=_convert_for_dynamo(record))
        except (ClientError, BotoCoreError) as e:
            raise _store_error("put_item", e)
        return record

    def _update(self, user_id: str, item_id: str, updates: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Apply partial updates to an existing item. Returns the updated item or
        None when the item does not exist.
        """
        if not updates:
            return self._get(user_id, item_id)

        update_expression_parts = []
        expression_attribute_values = {}
        expression_attribute_names = {"#pk": "user_id"}

        for idx, (key, value) in enumerate(updates.items()):
            placeholder = f"#f{idx}"
            value_placeholder = f":v{idx}"
            update_expression_parts.append(f"{placeholder} = {value_placeholder}")
            expression_attribute_names[placeholder] = key
            expression_attribute_values[value_placeholder] = value

        try:
            response = self._table.update_item(
                Key={"user_id": user_id, "id": item_id},
                UpdateExpression="SET " + ", ".join(update_expression_parts),
                ConditionExpression="attribute_exists(#pk)",
                ExpressionAttributeNames=expression_attribute_names,
                ExpressionAttributeValues=_convert_for_dynamo(expression_attribute_values),
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException":
                return None
            raise _store_error("update_item", e)
        except BotoCoreError as e:
            raise _store_error("update_item", e)
        attributes = response.get("Attributes")
        return _from_item(attributes) if attributes else None

    def _delete(self, user_id: str, item_id: str) -> bool:
        try:
            response = self._table.delete_item(
                Key={"user_id": user_id, "id": item_id},
                ReturnValues="ALL_OLD",
            )
        except (ClientError, BotoCoreError) as e:
            raise _store_error("delete_item", e)
        return "Attributes" in response

    def ping(self) -> None:
        try:
            self._table.load()
        except (ClientError, BotoCoreError) as e:
            raise _store_error("describe_table", e)


class DynamoTransactionStore(_DynamoTable, TransactionStore):
    def find_by_user(self, user_id: str, query: Optional[TransactionQuery] = None) -> List[Dict[str, Any]]:
        query = query or TransactionQuery()
        items = self._query_user(user_id, _filter_expression(query))
        # Server-side filters cover the exact-match fields; the
        # case-insensitive search can only be evaluated here.
        matched = [item for item in items if query.matches(item)]
        return sorted(matched, key=lambda item: item.get("created_at") or datetime.min)

    def get(self, user_id, transaction_id):
        return self._get(user_id, transaction_id)

    def put(self, record):
        return self._put(record)

    def update(self, user_id, transaction_id, changes):
        return self._update(user_id, transaction_id, changes)

    def delete(self, user_id, transaction_id):
        return self._delete(user_id, transaction_id)


class DynamoCategoryStore(_DynamoTable, CategoryStore):
    def find_by_user(self, user_id):
        items = self._query_user(user_id)
        return sorted(items, key=lambda item: item.get("created_at") or datetime.min)

    def get(self, user_id, category_id):
        return self._get(user_id, category_id)

    def put(self, record):
        return self._put(record)

    def update(self, user_id, category_id, changes):
        return self._update(user_id, category_id, changes)

    def delete(self, user_id, category_id):
        return self._delete(user_id, category_id)


def _filter_expression(query: TransactionQuery):
    conditions = []
    if query.category is not None:
        conditions.append(Attr("category").eq(query.category))
    if query.status is not None:
        conditions.append(Attr("status").eq(query.status))
    if query.start is not None and query.end is not None:
        conditions.append(Attr("date").between(format_timestamp(query.start), format_timestamp(query.end)))
    elif query.start is not None:
        conditions.append(Attr("date").gte(format_timestamp(query.start)))
    elif query.end is not None:
        conditions.append(Attr("date").lte(format_timestamp(query.end)))

    expression = None
    for condition in conditions:
        expression = condition if expression is None else expression & condition
    return expression


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal and datetimes to sortable ISO
    strings for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, datetime):
        return format_timestamp(obj)
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj


def _from_item(item: Dict[str, Any]) -> Dict[str, Any]:
    record = _from_dynamo(item)
    for name in TIMESTAMP_FIELDS:
        if record.get(name):
            record[name] = parse_timestamp(record[name])
    if "amount" in record:
        record["amount"] = float(record["amount"])
    return record
