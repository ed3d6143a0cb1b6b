# -*- coding: utf-8 -*-
"""
    pgconstrdiff.database
    ~~~~~~~~~~~~~~~~~~~~~

    A `Database` is initialized with a configuration dictionary.  It
    consists of one or two `Dicts` objects, each holding the schema,
    table and constraint dictionaries.  The `db` Dicts object defines
    the existing (old) database, usually by querying the system
    catalogs.  The `ndb` Dicts object defines the new database based
    on the input map supplied to the `diff_map` method.
"""
import logging

from pgconstrdiff.dbconn import DbConnection
from pgconstrdiff.dbobject import fetch_reserved_words
from pgconstrdiff.dbobject.schema import SchemaDict
from pgconstrdiff.dbobject.table import ClassDict
from pgconstrdiff.dbobject.constraint import ConstraintDict
from pgconstrdiff.diffconstraints import DEFAULT_CLASSES
from pgconstrdiff.diffconstraints import plan_schemas, comment_changes


logger = logging.getLogger(__name__)


class CatDbConnection(DbConnection):
    """A database connection, specialized for querying catalogs"""

    def connect(self):
        """Connect to the database"""
        super(CatDbConnection, self).connect()
        self._version = self.conn.info.server_version

    @property
    def version(self):
        "The server's version number"
        if self.conn is None:
            self.connect()
        return self._version


class Database(object):
    """A database definition, from its catalogs and/or a YAML spec."""

    class Dicts(object):
        """A holder for dictionaries (maps) describing a database"""

        def __init__(self, dbconn=None):
            """Initialize the various DbObjectDict-derived dictionaries

            :param dbconn: a DbConnection object
            """
            self.schemas = SchemaDict(dbconn)
            self.tables = ClassDict(dbconn)
            self.constraints = ConstraintDict(dbconn)

        def link_refs(self):
            """Link constraints to their tables and tables to schemas"""
            self.tables.link_refs(self.constraints)
            self.schemas.link_refs(self.tables)

        def trim(self, schemas):
            """Remove objects outside the given schemas

            :param schemas: list of schemas to keep
            """
            for objdict in (self.tables, self.constraints):
                for key in list(objdict.keys()):
                    # key[0] is the schema name in these dicts
                    if key[0] not in schemas:
                        del objdict[key]
            for sch in list(self.schemas.keys()):
                if sch not in schemas:
                    del self.schemas[sch]

    def __init__(self, config):
        """Initialize the database

        :param config: configuration dictionary
        """
        db = config['database']
        self.dbconn = CatDbConnection(
            db.get('dbname'), db.get('username'), db.get('password'),
            db.get('host'), db.get('port'))
        self.db = None
        self.ndb = None
        self.config = config

    def from_catalog(self):
        """Populate the database objects by querying the catalogs

        The `db` holder is populated by the DbObjectDict-derived
        classes by querying the catalogs.  The constraints are then
        linked to their tables and the tables to their schemas.
        """
        self.db = self.Dicts(self.dbconn)
        self.db.link_refs()
        logger.info("Loaded %d table(s), %d constraint(s) from database %s",
                    len(self.db.tables), len(self.db.constraints),
                    self.dbconn.dbname)

    def from_map(self, input_map):
        """Populate database objects from an input map

        :param input_map: a YAML map defining a database
        :return: Dicts object
        """
        dbdicts = self.Dicts()
        input_schemas = {}
        for key in input_map:
            if key.startswith('schema '):
                input_schemas.update({key: input_map[key]})
            else:
                raise KeyError("Expected typed object, found '%s'" % key)
        dbdicts.schemas.from_map(input_schemas, dbdicts)
        dbdicts.link_refs()
        return dbdicts

    def diff_map(self, input_map, quote_reserved=True):
        """Generate SQL to transform the constraints of a database

        :param input_map: a YAML map defining the new database
        :param quote_reserved: fetch reserved words
        :return: list of SQL statements

        Compares the existing database definition, as fetched from the
        catalogs, to the input YAML map and generates SQL statements
        to transform the constraints into those of the input.
        """
        if not self.db:
            self.from_catalog()
        # quote_reserved is only set to False by tests
        if quote_reserved:
            fetch_reserved_words(self.dbconn)
        self.dbconn.close()
        self.ndb = self.from_map(input_map)
        return self._diff()

    def diff_two_map(self, old_map, new_map):
        """Generate SQL to transform the constraints of one map to another

        :param old_map: a YAML map defining the original database
        :param new_map: a YAML map defining the new database
        :return: list of SQL statements

        No database connection is needed.
        """
        self.db = self.from_map(old_map)
        self.ndb = self.from_map(new_map)
        return self._diff()

    def _diff(self):
        opts = self.config['options']
        if opts.schemas:
            self.db.trim(opts.schemas)
            self.ndb.trim(opts.schemas)
        if opts.revert:
            (self.db, self.ndb) = (self.ndb, self.db)

        diffcfg = self.config.get('diff') or {}
        classes = diffcfg.get('classes') or DEFAULT_CLASSES
        pairs = [(self.db.schemas.get(name), schema)
                 for (name, schema) in self.ndb.schemas.items()]
        stmts = plan_schemas(pairs, classes).statements()
        if diffcfg.get('comments', True):
            for (old_schema, new_schema) in pairs:
                stmts.extend(comment_changes(old_schema, new_schema))
        return stmts
