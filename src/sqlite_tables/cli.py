"""Command line tool for inspecting and creating entity tables."""

from __future__ import annotations

import argparse
import importlib
import logging
import sys

from sqlite_tables import config
from sqlite_tables.compiler import PredicateCompiler
from sqlite_tables.exceptions import SQLiteException
from sqlite_tables.parsing import MethodNameParser, ParsedQuery, Verb
from sqlite_tables.registry import default_registry
from sqlite_tables.schema import SchemaBuilder, quote_identifier
from sqlite_tables.storage import SQLiteManagement
from sqlite_tables.types import EntityMetadata

logger = logging.getLogger(__name__)


def load_entity(spec: str) -> type:
    """Import an entity class given as ``package.module:ClassName``."""
    module_name, sep, class_name = spec.partition(":")
    if not sep or not module_name or not class_name:
        raise ValueError(f"Expected module:Class, got '{spec}'")
    module = importlib.import_module(module_name)
    try:
        entity_type = getattr(module, class_name)
    except AttributeError:
        raise ValueError(f"Module '{module_name}' has no class '{class_name}'") from None
    if not isinstance(entity_type, type):
        raise ValueError(f"'{spec}' is not a class")
    return entity_type


def explain(metadata: EntityMetadata, parsed: ParsedQuery) -> str:
    """Render the SQL that a method name compiles to for an entity."""
    compiled = PredicateCompiler().compile(parsed, metadata.field_to_column)
    table = quote_identifier(metadata.table_name)
    suffix = compiled.sql_suffix()

    if parsed.verb is Verb.SAVE:
        columns = [c.column_name for c in metadata.columns.values() if not c.auto_increment]
        columns += [
            j.target_column_name
            for j in metadata.joins.values()
            if j.target_column_name not in columns
        ]
        names = ", ".join(quote_identifier(c) for c in columns)
        placeholders = ", ".join("?" for _ in columns)
        return f"INSERT INTO {table} ({names}) VALUES ({placeholders})"
    if parsed.verb in (Verb.FIND, Verb.FIND_ALL):
        return f"SELECT * FROM {table}{suffix}"
    if parsed.verb is Verb.EXISTS:
        return f"SELECT COUNT(*) FROM {table}{suffix}"
    if parsed.verb is Verb.DELETE:
        return f"DELETE FROM {table}{suffix}"

    if parsed.set_fields:
        compiler = PredicateCompiler()
        assignments = ", ".join(
            f"{quote_identifier(compiler.resolve(f, metadata.field_to_column))} = ?"
            for f in parsed.set_fields
        )
    else:
        assignments = "<column> = ?, ..."
    return f"UPDATE {table} SET {assignments}{suffix}"


def cmd_ddl(args: argparse.Namespace) -> int:
    builder = SchemaBuilder()
    for spec in args.entities:
        metadata = default_registry.describe(load_entity(spec))
        print(builder.build_create_table(metadata))
    return 0


def cmd_init(args: argparse.Namespace) -> int:
    builder = SchemaBuilder()
    management = SQLiteManagement(args.database)
    for spec in args.entities:
        metadata = default_registry.describe(load_entity(spec))
        builder.create_table(metadata, management)
        print(f"Created table '{metadata.table_name}' in {args.database}")
    return 0


def cmd_explain(args: argparse.Namespace) -> int:
    metadata = default_registry.describe(load_entity(args.entity))
    parsed = MethodNameParser().parse(args.method)
    print(explain(metadata, parsed))
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        prog="sqlite-tables",
        description="Inspect and create SQLite tables for annotated entity classes",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log SQL statements and metadata lookups",
    )
    subparsers = arg_parser.add_subparsers(dest="command", required=True)

    ddl_parser = subparsers.add_parser("ddl", help="Print CREATE TABLE statements")
    ddl_parser.add_argument("entities", nargs="+", help="Entity classes as module:Class")
    ddl_parser.set_defaults(func=cmd_ddl)

    init_parser = subparsers.add_parser("init", help="Create tables in a database file")
    init_parser.add_argument("database", help="Path to the SQLite database file")
    init_parser.add_argument("entities", nargs="+", help="Entity classes as module:Class")
    init_parser.set_defaults(func=cmd_init)

    explain_parser = subparsers.add_parser("explain", help="Print the SQL for a method name")
    explain_parser.add_argument("entity", help="Entity class as module:Class")
    explain_parser.add_argument("method", help="Method name, e.g. findAllByNameOrderByIdDesc")
    explain_parser.set_defaults(func=cmd_explain)

    args = arg_parser.parse_args(argv)

    logging.basicConfig(
        format=config.LOG_FORMAT,
        level=logging.DEBUG if args.verbose else config.get_log_level(),
    )

    try:
        return args.func(args)
    except (SQLiteException, ValueError, ImportError) as e:
        logger.debug("Command failed", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
