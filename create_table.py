import logging
import sys

from partiql_settings import PartiQLSettings, make_resource
from scaffold import Scaffold

if __name__ == "__main__":
    settings = PartiQLSettings()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s: %(message)s")

    # Create the DynamoDB table keyed by title and year.
    table_name = sys.argv[1] if len(sys.argv) > 1 else "movies"
    scaffold = Scaffold(make_resource(settings), settings)
    if scaffold.exists(table_name):
        print(f"Table {table_name} exists.")
    else:
        table = scaffold.create_table(table_name)
        print("Table status:", table.table_status)
