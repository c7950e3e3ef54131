import json
import logging
from decimal import Decimal

from botocore.exceptions import ClientError, WaiterError
from pydantic import ValidationError

from partiql_errors import BatchWriteError, FixtureError, ProvisioningError
from partiql_models import Movie
from partiql_settings import PartiQLSettings

logger = logging.getLogger(__name__)

# Maximum number of put requests DynamoDB accepts in one BatchWriteItem call.
BATCH_WRITE_LIMIT = 25


def _chunks(requests, size=BATCH_WRITE_LIMIT):
    for start in range(0, len(requests), size):
        yield requests[start:start + size]


class Scaffold:
    """Creates, fills and tears down the Amazon DynamoDB movie table used by the scenario."""

    def __init__(self, dyn_resource, settings: PartiQLSettings | None = None) -> None:
        """
        :param dyn_resource: A Boto3 DynamoDB resource.
        :param settings: Throughput and naming settings. Defaults are read from the environment.
        """
        self.dyn_resource = dyn_resource
        self.settings = settings or PartiQLSettings()
        # Set by 'exists' when the table is found, or by 'create_table'.
        self.table = None

    def exists(self, table_name) -> bool:
        """
        Determines whether a table exists. As a side effect, stores the table in
        a member variable.

        :param table_name: The name of the table to check.
        :return: True when the table exists; otherwise, False.
        """
        try:
            table = self.dyn_resource.Table(table_name)
            table.load()
        except ClientError as err:
            if err.response["Error"]["Code"] == "ResourceNotFoundException":
                return False
            logger.error(
                "Couldn't check for existence of %s. Here's why: %s: %s",
                table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise ProvisioningError(f"Couldn't describe table {table_name}") from err
        self.table = table
        return True

    def create_table(self, table_name):
        """
        Creates an Amazon DynamoDB table that can be used to store movie data.
        The table uses the title of the movie as the partition key and the
        release year as the sort key.

        :param table_name: The name of the table to create.
        :return: The newly created table.
        """
        try:
            table = self.dyn_resource.create_table(
                TableName=table_name,
                KeySchema=[
                    {"AttributeName": "title", "KeyType": "HASH"},  # Partition key
                    {"AttributeName": "year", "KeyType": "RANGE"},  # Sort key
                ],
                AttributeDefinitions=[
                    {"AttributeName": "title", "AttributeType": "S"},
                    {"AttributeName": "year", "AttributeType": "N"},
                ],
                ProvisionedThroughput={
                    "ReadCapacityUnits": self.settings.read_capacity,
                    "WriteCapacityUnits": self.settings.write_capacity,
                },
            )
            table.wait_until_exists()
        except ClientError as err:
            logger.error(
                "Couldn't create table %s. Here's why: %s: %s",
                table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise ProvisioningError(f"Couldn't create table {table_name}") from err
        except WaiterError as err:
            logger.error("Table %s never became active: %s", table_name, err)
            raise ProvisioningError(f"Table {table_name} never became active") from err
        logger.info("Created table %s", table_name)
        self.table = table
        return table

    @staticmethod
    def fetch_movie_data(path) -> list[Movie]:
        """
        Reads movie records from a JSON file holding an array of movies.

        :param path: Path to the fixture file.
        :return: The movies, in file order.
        """
        try:
            with open(path, encoding="utf-8") as json_file:
                data = json.load(json_file, parse_float=Decimal)
        except OSError as err:
            raise FixtureError(f"Couldn't read {path}: {err}") from err
        except json.JSONDecodeError as err:
            raise FixtureError(f"{path} is not valid JSON: {err}") from err

        if not isinstance(data, list):
            raise FixtureError(f"{path} must hold a JSON array of movies")
        try:
            return [Movie.model_validate(record) for record in data]
        except ValidationError as err:
            raise FixtureError(f"{path} holds an invalid movie record: {err}") from err

    def write_batch(self, movies) -> int:
        """
        Puts movies into the table with BatchWriteItem, at most 25 per request.
        Items the service leaves unprocessed are collected and sent again in a
        single retry pass.

        :param movies: The movies to put in the table.
        :return: The number of batch requests issued.
        """
        if self.table is None:
            raise ProvisioningError("No table selected; call create_table or exists first")
        table_name = self.table.name
        requests = [{"PutRequest": {"Item": movie.to_item()}} for movie in movies]

        batches = 0
        unprocessed = []
        for chunk in _chunks(requests):
            unprocessed.extend(self._send_batch(table_name, chunk))
            batches += 1

        if unprocessed:
            logger.info(
                "Retrying %s unprocessed items for table %s", len(unprocessed), table_name
            )
            pending, unprocessed = unprocessed, []
            for chunk in _chunks(pending):
                unprocessed.extend(self._send_batch(table_name, chunk))
                batches += 1

        if unprocessed:
            logger.error(
                "Couldn't write %s items to table %s after retrying.",
                len(unprocessed),
                table_name,
            )
            raise BatchWriteError(
                f"{len(unprocessed)} items were not written to {table_name}", unprocessed
            )
        logger.info("Wrote %s movies to table %s in %s requests", len(requests), table_name, batches)
        return batches

    def _send_batch(self, table_name, requests):
        try:
            response = self.dyn_resource.batch_write_item(RequestItems={table_name: requests})
        except ClientError as err:
            logger.error(
                "Couldn't write to table %s. Here's why: %s: %s",
                table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise
        return response.get("UnprocessedItems", {}).get(table_name, [])

    def delete_table(self, table_name):
        """
        Deletes the table and waits until it is gone.

        :param table_name: The name of the table to delete.
        """
        table = self.dyn_resource.Table(table_name)
        try:
            table.delete()
            table.wait_until_not_exists()
        except ClientError as err:
            logger.error(
                "Couldn't delete table %s. Here's why: %s: %s",
                table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise
        logger.info("Deleted table %s", table_name)
        if self.table is not None and self.table.name == table_name:
            self.table = None
