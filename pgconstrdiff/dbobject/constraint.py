# -*- coding: utf-8 -*-
"""
    pgconstrdiff.dbobject.constraint
    ~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~~

    This module defines six classes: Constraint derived from
    DbSchemaObject, CheckConstraint, PrimaryKey, ForeignKey and
    UniqueConstraint derived from Constraint, and ConstraintDict
    derived from DbObjectDict.

    Two constraints compare equal only if they have the same key and
    the same definition, so a constraint whose name is kept but whose
    columns or expression change is a different constraint.

    TODO: UniqueConstraint and PrimaryKey are nearly identical.
          Perhaps the latter should inherit from the former.
"""
from . import DbObjectDict, DbSchemaObject
from . import quote_id, split_schema_obj, commentable


KEY_COLUMNS = """ARRAY(SELECT attname::text
                  FROM unnest({keys}) WITH ORDINALITY AS k(attnum, ord)
                       JOIN pg_attribute a ON (a.attrelid = {rel}
                                               AND a.attnum = k.attnum)
                  ORDER BY ord)"""

CATALOG_QUERY = r"""
            SELECT conname AS name, nspname AS schema,
                   cl.relname AS table, {columns} AS columns,
                   {attrs}, coninhcount > 0 AS inherited, c.oid,
                   obj_description(c.oid, 'pg_constraint') AS description
            FROM pg_constraint c
                 JOIN pg_namespace ON (connamespace = pg_namespace.oid)
                 JOIN pg_class cl ON (conrelid = cl.oid)
                 {joins}
            WHERE nspname != 'pg_catalog' AND nspname != 'information_schema'
                  AND nspname NOT LIKE 'pg_temp\_%'
                  AND nspname NOT LIKE 'pg_toast_temp\_%'
              AND contype = '{contype}'
              AND conrelid NOT IN (SELECT objid FROM pg_depend
                  WHERE deptype = 'e' AND classid = 'pg_class'::regclass)
            ORDER BY schema, "table", name"""


def _catalog_query(contype, attrs, joins=''):
    return CATALOG_QUERY.format(
        columns=KEY_COLUMNS.format(keys='conkey', rel='conrelid'),
        attrs=attrs, joins=joins, contype=contype)


class Constraint(DbSchemaObject):
    """A constraint definition, such as a primary key, foreign key or
    unique constraint."""

    keylist = ['schema', 'table', 'name']
    catalog = 'pg_constraint'
    primary_key = False

    def __init__(self, name, schema, table, description):
        """Initialize the constraint

        :param name: constraint name (from conname)
        :param schema: schema name (from connamespace)
        :param table: table name (from conrelid)
        :param description: comment text (from obj_description())
        """
        super(Constraint, self).__init__(name, schema, description)
        self.table = self.unqualify(table)

    def definition(self):
        """Return the attributes that make up the constraint definition

        :return: tuple

        The description is not part of the definition: a changed
        comment does not require recreating the constraint.
        """
        return ()

    # a constraint is equal to another if the definitions match too
    def __eq__(self, other):
        if self.__class__ is not other.__class__:
            return False
        try:
            return self.key() == other.key() and \
                self.definition() == other.definition()
        except (AttributeError, TypeError, KeyError):
            return False

    __hash__ = DbSchemaObject.__hash__

    def qualtable(self):
        """Return the schema-qualified name of the owning table

        :return: string
        """
        return self.qualname(objname=self.table)

    def key_columns(self):
        """Return comma-separated list of key column names

        :return: string
        """
        return ", ".join([quote_id(col) for col in self.columns])

    def _deferral(self):
        clause = ''
        if self.deferrable:
            clause += " DEFERRABLE"
        if self.deferred:
            clause += " INITIALLY DEFERRED"
        return clause

    def create(self):
        """Return the statements to create the constraint

        :return: list of SQL statements

        Inherited constraints are created along with the parent
        table's, so nothing is generated for them.
        """
        if self.inherited:
            return []
        return self.add()

    @commentable
    def add(self):
        """Return string to add the constraint via ALTER TABLE

        :return: list of SQL statements

        Works as is for primary keys and unique constraints but has
        to be overridden for check constraints and foreign keys.
        """
        tblspc = ''
        if self.tablespace is not None:
            tblspc = " USING INDEX TABLESPACE %s" % quote_id(self.tablespace)
        return ["ALTER TABLE %s ADD CONSTRAINT %s %s (%s)%s%s" % (
            self.qualtable(), quote_id(self.name), self.objtype,
            self.key_columns(), tblspc, self._deferral())]

    def drop(self):
        """Return string to drop the constraint via ALTER TABLE

        :return: list of SQL statements
        """
        if self.inherited:
            return []
        return ["ALTER TABLE %s DROP CONSTRAINT %s" % (
            self.qualtable(), quote_id(self.name))]

    def comment(self):
        """Return SQL statement to create COMMENT on constraint

        :return: SQL statement
        """
        text = 'NULL'
        if self.description is not None:
            text = "'%s'" % self.description.replace("'", "''")
        return "COMMENT ON CONSTRAINT %s ON %s IS %s" % (
            quote_id(self.name), self.qualtable(), text)

    def diff_description(self, incns):
        """Generate SQL statements to add or change COMMENTs

        :param incns: the new definition of the constraint
        :return: list of SQL statements
        """
        if self.description != incns.description:
            return [incns.comment()]
        return []


class CheckConstraint(Constraint):
    "A check constraint definition"

    def __init__(self, name, schema, table, description, columns,
                 expression, inherited=False, oid=None):
        """Initialize the check constraint

        :param name-description: see Constraint.__init__ params
        :param columns: list of columns (from conkey)
        :param expression: constraint expression (from conbin)
        :param inherited: is it inherited? (from coninhcount)
        """
        super(CheckConstraint, self).__init__(name, schema, table, description)
        self.columns = columns
        self.expression = expression
        self.inherited = inherited
        self.oid = oid

    @staticmethod
    def query(dbversion=None):
        return _catalog_query(
            'c', "pg_get_expr(conbin, conrelid) AS expression")

    @staticmethod
    def from_map(name, table, inobj):
        """Initialize a CheckConstraint instance from a YAML map

        :param name: constraint name
        :param table: table owning the constraint
        :param inobj: YAML map of the constraint
        :return: CheckConstraint instance
        """
        if inobj.get('expression') is None:
            raise KeyError("Constraint '%s' missing expression" % name)
        return CheckConstraint(
            name, table.schema, table.name, inobj.get('description'),
            inobj.get('columns', []), inobj['expression'],
            inobj.get('inherited', False))

    @property
    def objtype(self):
        return "CHECK"

    def _normalized_expression(self):
        expr = self.expression.strip()
        while expr.startswith('(') and expr.endswith(')') and \
                _balanced(expr[1:-1]):
            expr = expr[1:-1].strip()
        return expr

    def definition(self):
        return (self._normalized_expression(), self.inherited)

    @commentable
    def add(self):
        """Return string to add the CHECK constraint via ALTER TABLE

        :return: list of SQL statements
        """
        if self.expression[0] != '(':
            expr = "(%s)" % self.expression
        else:
            expr = self.expression
        return ["ALTER TABLE %s ADD CONSTRAINT %s %s %s" % (
            self.qualtable(), quote_id(self.name), self.objtype, expr)]


def _balanced(expr):
    "Check that an expression has no unmatched closing parenthesis"
    depth = 0
    for ch in expr:
        if ch == '(':
            depth += 1
        elif ch == ')':
            depth -= 1
            if depth < 0:
                return False
    return depth == 0


class PrimaryKey(Constraint):
    "A primary key constraint definition"

    primary_key = True

    def __init__(self, name, schema, table, description, columns,
                 tablespace=None, inherited=False, deferrable=False,
                 deferred=False, oid=None):
        """Initialize the primary key

        :param name-description: see Constraint.__init__ params
        :param columns: list of columns (from conkey)
        :param tablespace: storage tablespace (from spcname)
        :param inherited: is PK inherited? (from coninhcount)
        :param deferrable: is constraint deferrable? (from condeferrable)
        :param deferred: is constraint deferred? (from condeferred)
        """
        super(PrimaryKey, self).__init__(name, schema, table, description)
        self.columns = columns
        self.tablespace = tablespace
        self.inherited = inherited
        self.deferrable = deferrable
        self.deferred = deferred
        self.oid = oid

    @staticmethod
    def query(dbversion=None):
        return _catalog_query(
            'p', "condeferrable AS deferrable, condeferred AS deferred, "
            "spcname AS tablespace",
            """LEFT JOIN pg_class ic ON (conindid = ic.oid)
                 LEFT JOIN pg_tablespace t ON (ic.reltablespace = t.oid)""")

    @staticmethod
    def from_map(name, table, inobj):
        """Initialize a PrimaryKey instance from a YAML map

        :param name: key name
        :param table: table owning the key
        :param inobj: YAML map of the primary key
        :return: PrimaryKey instance
        """
        return PrimaryKey(
            name, table.schema, table.name, inobj.get('description'),
            inobj.get('columns', []), inobj.get('tablespace'),
            inobj.get('inherited', False), inobj.get('deferrable', False),
            inobj.get('deferred', False))

    @property
    def objtype(self):
        return "PRIMARY KEY"

    def definition(self):
        return (list(self.columns), self.tablespace, self.deferrable,
                self.deferred)


ACTIONS = {'r': 'restrict', 'c': 'cascade', 'n': 'set null',
           'd': 'set default'}
MATCH_TYPES = {'f': 'full', 'p': 'partial', 's': 'simple'}


def _action(name, code):
    if code is not None and len(code) == 1:
        return None if code == 'a' else ACTIONS[code]
    if code is not None and code not in ACTIONS.values():
        raise ValueError("Constraint '%s' has invalid action '%s'" % (
            name, code))
    return code


class ForeignKey(Constraint):
    "A foreign key constraint definition"

    def __init__(self, name, schema, table, description, columns,
                 ref_schema, ref_table, ref_cols, on_update=None,
                 on_delete=None, match=None, inherited=False,
                 deferrable=False, deferred=False, oid=None):
        """Initialize the foreign key

        :param name-description: see Constraint.__init__ params
        :param columns: list of columns (from conkey)
        :param ref_schema: schema of referenced table (from confrelid)
        :param ref_table: referenced table (from confrelid)
        :param ref_cols: referenced columns (from confkey)
        :param on_update: update action code (from confupdtype)
        :param on_delete: delete action code (from confdeltype)
        :param match: match action code (from confmatchtype)
        :param inherited: is FK inherited? (from coninhcount)
        :param deferrable: is constraint deferrable? (from condeferrable)
        :param deferred: is constraint deferred? (from condeferred)
        """
        super(ForeignKey, self).__init__(name, schema, table, description)
        self.columns = columns
        self.ref_schema = ref_schema
        self.ref_table = ref_table
        self.ref_cols = ref_cols
        self.on_update = _action(name, on_update)
        self.on_delete = _action(name, on_delete)
        if match is not None and len(match) == 1:
            self.match = MATCH_TYPES[match]
        elif match is None:
            self.match = 'simple'
        elif match in MATCH_TYPES.values():
            self.match = match
        else:
            raise ValueError("Constraint '%s' has invalid match type '%s'" % (
                name, match))
        self.inherited = inherited
        self.deferrable = deferrable
        self.deferred = deferred
        self.oid = oid

    @staticmethod
    def query(dbversion=None):
        return _catalog_query(
            'f', "condeferrable AS deferrable, condeferred AS deferred, "
            "rn.nspname AS ref_schema, rc.relname AS ref_table, "
            "%s AS ref_cols, confupdtype AS on_update, "
            "confdeltype AS on_delete, confmatchtype AS match" %
            KEY_COLUMNS.format(keys='confkey', rel='confrelid'),
            """JOIN pg_class rc ON (confrelid = rc.oid)
                 JOIN pg_namespace rn ON (rc.relnamespace = rn.oid)""")

    @staticmethod
    def from_map(name, table, inobj):
        """Initialize a ForeignKey instance from a YAML map

        :param name: key name
        :param table: table owning the key
        :param inobj: YAML map of the foreign key
        :return: ForeignKey instance
        """
        if 'references' not in inobj:
            raise KeyError("Constraint '%s' missing references" % name)
        refs = inobj['references']
        if 'table' not in refs:
            raise KeyError("Constraint '%s' missing table reference" % name)
        (ref_schema, ref_table) = split_schema_obj(
            refs['table'], refs.get('schema', table.schema))
        if 'columns' not in refs:
            raise KeyError("Constraint '%s' missing reference columns" % name)
        return ForeignKey(
            name, table.schema, table.name, inobj.get('description'),
            inobj.get('columns', []), ref_schema, ref_table, refs['columns'],
            inobj.get('on_update'), inobj.get('on_delete'),
            inobj.get('match'), inobj.get('inherited', False),
            inobj.get('deferrable', False), inobj.get('deferred', False))

    @property
    def objtype(self):
        return "FOREIGN KEY"

    def ref_columns(self):
        """Return comma-separated list of reference column names

        :return: string
        """
        return ", ".join([quote_id(col) for col in self.ref_cols])

    def definition(self):
        return (list(self.columns), self.ref_schema, self.ref_table,
                list(self.ref_cols), self.match, self.on_update,
                self.on_delete, self.deferrable, self.deferred)

    @commentable
    def add(self):
        """Return string to add the foreign key via ALTER TABLE

        :return: list of SQL statements
        """
        match = ''
        if self.match is not None and self.match != 'simple':
            match = " MATCH %s" % self.match.upper()
        actions = ''
        if self.on_update is not None:
            actions = " ON UPDATE %s" % self.on_update.upper()
        if self.on_delete is not None:
            actions += " ON DELETE %s" % self.on_delete.upper()

        return ["ALTER TABLE %s ADD CONSTRAINT %s FOREIGN KEY (%s) "
                "REFERENCES %s (%s)%s%s%s" % (
                    self.qualtable(), quote_id(self.name), self.key_columns(),
                    self.qualname(self.ref_schema, self.ref_table),
                    self.ref_columns(), match, actions, self._deferral())]


class UniqueConstraint(Constraint):
    "A unique constraint definition"

    def __init__(self, name, schema, table, description, columns,
                 tablespace=None, inherited=False, deferrable=False,
                 deferred=False, oid=None):
        """Initialize the unique constraint

        :param name-description: see Constraint.__init__ params
        :param columns: list of columns (from conkey)
        :param tablespace: storage tablespace (from spcname)
        :param inherited: is it inherited? (from coninhcount)
        :param deferrable: is constraint deferrable? (from condeferrable)
        :param deferred: is constraint deferred? (from condeferred)
        """
        super(UniqueConstraint, self).__init__(
            name, schema, table, description)
        self.columns = columns
        self.tablespace = tablespace
        self.inherited = inherited
        self.deferrable = deferrable
        self.deferred = deferred
        self.oid = oid

    @staticmethod
    def query(dbversion=None):
        return _catalog_query(
            'u', "condeferrable AS deferrable, condeferred AS deferred, "
            "spcname AS tablespace",
            """LEFT JOIN pg_class ic ON (conindid = ic.oid)
                 LEFT JOIN pg_tablespace t ON (ic.reltablespace = t.oid)""")

    @staticmethod
    def from_map(name, table, inobj):
        """Initialize a UniqueConstraint instance from a YAML map

        :param name: constraint name
        :param table: table owning the constraint
        :param inobj: YAML map of the constraint
        :return: UniqueConstraint instance
        """
        return UniqueConstraint(
            name, table.schema, table.name, inobj.get('description'),
            inobj.get('columns', []), inobj.get('tablespace'),
            inobj.get('inherited', False), inobj.get('deferrable', False),
            inobj.get('deferred', False))

    @property
    def objtype(self):
        return "UNIQUE"

    def definition(self):
        return (list(self.columns), self.tablespace, self.deferrable,
                self.deferred)


class ConstraintDict(DbObjectDict):
    "The collection of table constraints in a database"

    cls = Constraint

    def _from_catalog(self):
        """Initialize the dictionary of constraints by querying the catalogs"""
        for cls in (CheckConstraint, PrimaryKey, ForeignKey,
                    UniqueConstraint):
            self.cls = cls
            for obj in self.fetch():
                self[obj.key()] = obj
                self.by_oid[obj.oid] = obj

    def from_map(self, table, inconstrs):
        """Initialize the dictionary of constraints by converting the input map

        :param table: table affected by the constraints
        :param inconstrs: YAML map defining the constraints
        """
        if inconstrs.get('check_constraints'):
            chks = inconstrs['check_constraints']
            for cns in chks:
                self[(table.schema, table.name, cns)] = \
                    CheckConstraint.from_map(cns, table, chks[cns] or {})
        if inconstrs.get('primary_key'):
            pkeys = inconstrs['primary_key']
            if len(pkeys) != 1:
                raise ValueError("Table '%s' must have a single primary key"
                                 % table.name)
            cns = list(pkeys.keys())[0]
            self[(table.schema, table.name, cns)] = PrimaryKey.from_map(
                cns, table, pkeys[cns] or {})
        if inconstrs.get('foreign_keys'):
            fkeys = inconstrs['foreign_keys']
            for cns in fkeys:
                self[(table.schema, table.name, cns)] = ForeignKey.from_map(
                    cns, table, fkeys[cns] or {})
        if inconstrs.get('unique_constraints'):
            uconstrs = inconstrs['unique_constraints']
            for cns in uconstrs:
                self[(table.schema, table.name, cns)] = \
                    UniqueConstraint.from_map(cns, table, uconstrs[cns] or {})
