# -*- coding: utf-8 -*-
"""
    pgconstrdiff.dbobject
    ~~~~~~~~~~~~~~~~~~~~~

    Base classes of the model: DbObject for a single catalog object,
    DbSchemaObject for one living in a schema, and DbObjectDict for
    the dictionaries holding them.  Also identifier quoting helpers.
"""
import string
from functools import wraps


VALID_FIRST_CHARS = string.ascii_lowercase + '_'
VALID_CHARS = string.ascii_lowercase + string.digits + '_$'

# reserved keywords (catcode 'R' in pg_get_keywords) as of PostgreSQL 16,
# used until they can be fetched from a server
RESERVED_WORDS = [
    'all', 'analyse', 'analyze', 'and', 'any', 'array', 'as', 'asc',
    'asymmetric', 'both', 'case', 'cast', 'check', 'collate', 'column',
    'constraint', 'create', 'current_catalog', 'current_date',
    'current_role', 'current_time', 'current_timestamp', 'current_user',
    'default', 'deferrable', 'desc', 'distinct', 'do', 'else', 'end',
    'except', 'false', 'fetch', 'for', 'foreign', 'from', 'grant', 'group',
    'having', 'in', 'initially', 'intersect', 'into', 'lateral', 'leading',
    'limit', 'localtime', 'localtimestamp', 'not', 'null', 'offset', 'on',
    'only', 'or', 'order', 'placing', 'primary', 'references', 'returning',
    'select', 'session_user', 'some', 'symmetric', 'system_user', 'table',
    'then', 'to', 'trailing', 'true', 'union', 'unique', 'user', 'using',
    'variadic', 'when', 'where', 'window', 'with']


def fetch_reserved_words(db):
    """Replace the reserved words by those of the connected server

    :param db: DbConnection object

    The built-in list is kept if the server returns nothing.
    """
    global RESERVED_WORDS

    words = [row['word'] for row in db.fetchall(
        "SELECT word FROM pg_get_keywords() WHERE catcode = 'R'")]
    if words:
        RESERVED_WORDS = words


def quote_id(name):
    """Quote an identifier if it is reserved or not a regular identifier

    :param name: string to be quoted
    :return: possibly quoted string
    """
    if name[0] in VALID_FIRST_CHARS and name not in RESERVED_WORDS and \
            all(ltr in VALID_CHARS for ltr in name[1:]):
        return name
    return '"%s"' % name.replace('"', '""')


def split_schema_obj(obj, sch=None):
    """Return a (schema, object) tuple given a possibly schema-qualified name

    :param obj: object name or schema.object
    :param sch: schema name (defaults to 'public')
    :return: tuple
    """
    def undelim(ident):
        if ident[0] == '"' and ident[-1] == '"':
            ident = ident[1:-1]
        return ident

    qualsch = sch
    if sch is None:
        qualsch = 'public'
    if obj[0] == '"' and obj[-1] == '"':
        if '"."' in obj:
            (qualsch, obj) = obj.split('"."')
            qualsch = qualsch[1:]
            obj = obj[:-1]
        else:
            obj = obj[1:-1]
    elif '.' in obj:
        (qualsch, obj) = obj.split('.', 1)
    return (undelim(qualsch), undelim(obj))


def commentable(func):
    """Decorator appending a COMMENT to the statements creating an object"""
    @wraps(func)
    def add_comment(obj, *args, **kwargs):
        stmts = func(obj, *args, **kwargs)
        if stmts and obj.description is not None:
            stmts.append(obj.comment())
        return stmts
    return add_comment


class DbObject(object):
    "A single object in a database catalog, e.g., a schema, a table"

    keylist = ['name']
    """Attributes that uniquely identify the object, see :meth:`key`"""

    catalog = None
    """The system catalog where these objects live"""

    def __init__(self, name, description=None):
        """Initialize the catalog object

        :param name: name of object
        :param description: comment text describing object
        """
        self.name = name
        self.description = description

    def __repr__(self):
        return "<%s %r at 0x%x>" % (self.__class__.__name__, self.key(),
                                    id(self))

    def __hash__(self):
        return hash((self.__class__, self.key()))

    def __eq__(self, other):
        if self.__class__ is other.__class__:
            return self.key() == other.key()
        return False

    def __ne__(self, other):
        return not self.__eq__(other)

    @staticmethod
    def query(dbversion=None):
        """The SQL SELECT query fetching the objects from the catalogs

        :param dbversion: Postgres version identifier
        """
        return ""

    def key(self):
        """Return the name, or the tuple of :attr:`keylist` values

        :return: a single string or a tuple of strings

        Schemas are keyed by name, tables by schema and name, and
        constraints by schema, table and name.
        """
        lst = [getattr(self, k) for k in self.keylist]
        return len(lst) == 1 and lst[0] or tuple(lst)


class DbSchemaObject(DbObject):
    "A database object that is owned by a certain schema"

    def __init__(self, name, schema='public', description=None):
        super(DbSchemaObject, self).__init__(name, description)
        self.schema = schema

    def qualname(self, schema=None, objname=None):
        """Return the schema-qualified name of self or a related object

        :return: string
        """
        if objname is None:
            objname = self.name
        return "%s.%s" % (quote_id(schema or self.schema), quote_id(objname))

    def unqualify(self, objname):
        """Adjust the object name if it is qualified

        :param objname: object name
        :return: unqualified object name
        """
        if '.' in objname:
            (sch, objname) = split_schema_obj(objname, self.schema)
            if sch != self.schema:
                raise ValueError("Object '%s' is not in schema '%s'" % (
                    objname, self.schema))
        return objname


class DbObjectDict(dict):
    """A dictionary of database objects of one (possibly polymorphic) type

    If a connection is given, the dictionary is filled from the
    catalogs using the :meth:`query` of :attr:`cls`.
    """

    cls = DbObject

    def __init__(self, dbconn=None):
        dict.__init__(self)
        self.by_oid = {}
        self.dbconn = dbconn
        if dbconn:
            self._from_catalog()

    def _from_catalog(self):
        for obj in self.fetch():
            self[obj.key()] = obj
            if getattr(obj, 'oid', None) is not None:
                self.by_oid[obj.oid] = obj

    def fetch(self):
        """Fetch all objects of :attr:`cls` from the catalogs

        :return: list of self.cls (polymorphic) objects
        """
        data = self.dbconn.fetchall(self.cls.query(self.dbconn.version))
        self.dbconn.rollback()
        return [self.cls(**dict(row)) for row in data]
