import logging
import sys
import uuid
from decimal import Decimal

from botocore.exceptions import ClientError, HTTPClientError
from botocore.exceptions import ConnectionError as BotoConnectionError

from partiql_errors import DuplicateKeyError, NotFoundError, TransportError
from partiql_models import BatchStatementResult, StatementResult
from partiql_settings import PartiQLSettings, make_resource
from scaffold import Scaffold

logger = logging.getLogger(__name__)

# Error codes DynamoDB returns for PartiQL writes that hit a missing or existing key.
MISSING_KEY_CODE = "ConditionalCheckFailedException"
DUPLICATE_KEY_CODE = "DuplicateItemException"

# Connection, proxy, SSL and timeout failures raised by botocore before a response arrives.
TRANSPORT_ERRORS = (BotoConnectionError, HTTPClientError)


class PartiQLWrapper:
    """Runs PartiQL statements against an Amazon DynamoDB table of movie data."""

    def __init__(self, dyn_resource, table_name) -> None:
        """
        :param dyn_resource: A Boto3 DynamoDB resource. Its client serializes
                             parameters and deserializes items.
        :param table_name: The table every statement runs against.
        """
        self.dyn_resource = dyn_resource
        self.table_name = table_name

    def _execute(self, action, statement, parameters):
        try:
            return self.dyn_resource.meta.client.execute_statement(
                Statement=statement, Parameters=parameters
            )
        except ClientError as err:
            code = err.response["Error"]["Code"]
            logger.error(
                "Couldn't %s in table %s. Here's why: %s: %s",
                action,
                self.table_name,
                code,
                err.response["Error"]["Message"],
            )
            if code == MISSING_KEY_CODE:
                raise NotFoundError(f"Couldn't {action}: no such item") from err
            if code == DUPLICATE_KEY_CODE:
                raise DuplicateKeyError(f"Couldn't {action}: item already exists") from err
            raise
        except TRANSPORT_ERRORS as err:
            logger.error("Couldn't reach DynamoDB to %s: %s", action, err)
            raise TransportError(str(err)) from err

    def _batch_execute(self, action, statements):
        try:
            return self.dyn_resource.meta.client.batch_execute_statement(Statements=statements)
        except ClientError as err:
            logger.error(
                "Couldn't %s in table %s. Here's why: %s: %s",
                action,
                self.table_name,
                err.response["Error"]["Code"],
                err.response["Error"]["Message"],
            )
            raise
        except TRANSPORT_ERRORS as err:
            logger.error("Couldn't reach DynamoDB to %s: %s", action, err)
            raise TransportError(str(err)) from err

    def select_item_by_title(self, title) -> StatementResult:
        """
        Gets the movies with the given title. Titles are partition keys, so
        movies of the same title from different years all match.

        :param title: The title of the movie.
        :return: The matching movies; empty when nothing matches.
        """
        response = self._execute(
            f"select movie {title}",
            f'SELECT * FROM "{self.table_name}" WHERE title = ?',
            [title],
        )
        return StatementResult.from_response(response)

    def update_rating_by_title(self, title, year, rating) -> None:
        """
        Sets the rating of one movie.

        :param title: The title of the movie to update.
        :param year: The release year of the movie to update.
        :param rating: The new rating.
        """
        self._execute(
            f"update movie {title}",
            f'UPDATE "{self.table_name}" SET info.rating = ? WHERE title = ? AND year = ?',
            [Decimal(str(rating)), title, year],
        )
        logger.info("Updated rating of %s (%s) to %s", title, year, rating)

    def delete_item_by_title(self, title, year) -> None:
        """
        Deletes one movie. Deleting a movie that is not in the table is not an error.

        :param title: The title of the movie to delete.
        :param year: The release year of the movie to delete.
        """
        self._execute(
            f"delete movie {title}",
            f'DELETE FROM "{self.table_name}" WHERE title = ? AND year = ?',
            [title, year],
        )
        logger.info("Deleted %s (%s)", title, year)

    def insert_item(self, title, year, plot, rating) -> None:
        """
        Adds a movie to the table.

        :param title: The title of the movie.
        :param year: The release year of the movie.
        :param plot: The plot summary of the movie.
        :param rating: The quality rating of the movie.
        """
        self._execute(
            f"insert movie {title}",
            self._insert_statement(),
            [title, year, {"plot": plot, "rating": Decimal(str(rating))}],
        )
        logger.info("Added %s (%s) to table %s", title, year, self.table_name)

    def batch_execute_select(self, titles) -> BatchStatementResult:
        """
        Selects movies by title with one statement per title, sent as a single batch.

        :param titles: The titles to look up.
        :return: One response per title, in the same order.
        """
        response = self._batch_execute(
            "select a batch of movies",
            [
                {
                    "Statement": f'SELECT * FROM "{self.table_name}" WHERE title = ?',
                    "Parameters": [title],
                }
                for title in titles
            ],
        )
        return BatchStatementResult.from_response(response)

    def batch_execute_write(self, key_pairs) -> BatchStatementResult:
        """
        Deletes movies with one statement per (title, year) pair, sent as a single batch.

        :param key_pairs: (title, year) pairs of the movies to delete.
        :return: One response per pair, in the same order.
        """
        response = self._batch_execute(
            "delete a batch of movies",
            [
                {
                    "Statement": f'DELETE FROM "{self.table_name}" WHERE title = ? AND year = ?',
                    "Parameters": [title, year],
                }
                for title, year in key_pairs
            ],
        )
        result = BatchStatementResult.from_response(response)
        logger.info(
            "Deleted a batch of %s movies with %s errors", len(result.responses), len(result.errors)
        )
        return result

    def batch_execute_insert(self, movies) -> BatchStatementResult:
        """
        Inserts movies with one statement per movie, sent as a single batch.

        :param movies: The movies to insert.
        :return: One response per movie, in the same order.
        """
        statements = []
        for movie in movies:
            info = movie.info.model_dump(exclude_none=True) if movie.info else {}
            statements.append(
                {"Statement": self._insert_statement(), "Parameters": [movie.title, movie.year, info]}
            )
        response = self._batch_execute("insert a batch of movies", statements)
        return BatchStatementResult.from_response(response)

    def _insert_statement(self):
        return f"INSERT INTO \"{self.table_name}\" VALUE {{'title': ?, 'year': ?, 'info': ?}}"


def run_scenario(dyn_resource, table_name, fixture_path, settings=None):
    scaffold = Scaffold(dyn_resource, settings)
    wrapper = PartiQLWrapper(dyn_resource, table_name)

    print(f"Creating table {table_name}...")
    scaffold.create_table(table_name)
    try:
        movies = scaffold.fetch_movie_data(fixture_path)
        scaffold.write_batch(movies)
        print(f"Wrote {len(movies)} movies to {table_name}.")

        result = wrapper.select_item_by_title("Star Wars")
        for movie in result.items:
            print(f"Found {movie.title} ({movie.year})")

        wrapper.update_rating_by_title("The Big Lebowski", 1998, 10.0)
        wrapper.delete_item_by_title("The Silence of the Lambs", 1991)
        wrapper.insert_item("The Prancing of the Lambs", 2005, "A movie about happy livestock.", 5.0)

        batch = wrapper.batch_execute_select(["Star Wars", "The Big Lebowski", "The Prancing of the Lambs"])
        print(f"Batch select returned {len(batch.responses)} responses.")
        wrapper.batch_execute_write([("Mean Girls", 2004), ("The Prancing of the Lambs", 2005)])
    finally:
        if scaffold.exists(table_name):
            scaffold.delete_table(table_name)
            print(f"Deleted table {table_name}.")


if __name__ == "__main__":
    settings = PartiQLSettings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")
    try:
        run_scenario(
            make_resource(settings),
            settings.table_name_for(uuid.uuid4().hex[:8]),
            settings.fixture_path,
            settings,
        )
    except Exception as e:
        print(f"Something went wrong: {e}")
        sys.exit(1)
