# -*- coding: utf-8 -*-
"""
    pgconstrdiff.diffconstraints
    ~~~~~~~~~~~~~~~~~~~~~~~~~~~~

    Selection of the constraints that have to be dropped and created
    to turn the constraints of an old table into those of a new one.

    Constraints are matched by name within a table.  A constraint
    present on both sides with a different definition is both dropped
    (old definition) and created (new definition), so the DROP
    statements must be run before the CREATE statements.
    :class:`ConstraintPlan` keeps both lists together and always
    returns the statements in that order.

    Primary keys and all other constraints are handled in separate
    passes, selected with a :class:`ConstraintClass`.

    TODO: a constraint on a column that the column diff drops is
          removed by PostgreSQL along with the column, yet it is still
          selected here for an explicit DROP.
"""
import logging
from collections import namedtuple
from enum import Enum


logger = logging.getLogger(__name__)


class ConstraintClass(Enum):
    "The two classes of constraints, each diffed in its own pass"

    PRIMARY_KEY = 'primary_key'
    OTHER = 'other'

    def matches(self, constraint):
        """Does the constraint belong to this class?

        :param constraint: a Constraint
        :return: bool
        """
        return constraint.primary_key == (self is ConstraintClass.PRIMARY_KEY)


DEFAULT_CLASSES = (ConstraintClass.PRIMARY_KEY, ConstraintClass.OTHER)


def constraint_class(value):
    """Return the ConstraintClass for a class, a boolean or a name

    :param value: ConstraintClass, True for primary keys, False for
                  the others, or 'primary_key' or 'other'
    :return: ConstraintClass
    """
    if isinstance(value, ConstraintClass):
        return value
    if isinstance(value, bool):
        return ConstraintClass.PRIMARY_KEY if value else ConstraintClass.OTHER
    try:
        return ConstraintClass(value)
    except ValueError:
        raise ValueError("Unknown constraint class '%s'" % value)


def select_drops(old_table, new_table, conclass):
    """Return the constraints that must be dropped from the old table

    :param old_table: original table or None
    :param new_table: new table or None
    :param conclass: class of constraints to consider
    :return: list of constraints, in old table order

    A constraint is dropped if the new table has no constraint with
    the same name, or has one with a different definition.  Nothing is
    dropped when either table is missing: dropping a whole table is
    not handled here.
    """
    conclass = constraint_class(conclass)
    drops = []
    if old_table is None or new_table is None:
        return drops

    for constr in old_table.constraints.values():
        if not conclass.matches(constr):
            continue
        newconstr = new_table.get_constraint(constr.name)
        if newconstr is None:
            logger.debug("Constraint %s on %s no longer present",
                         constr.name, old_table.name)
            drops.append(constr)
        elif newconstr != constr:
            logger.debug("Constraint %s on %s changed definition",
                         constr.name, old_table.name)
            drops.append(constr)
    return drops


def select_creates(old_table, new_table, conclass):
    """Return the constraints that must be created on the new table

    :param old_table: original table or None
    :param new_table: new table or None
    :param conclass: class of constraints to consider
    :return: list of constraints, in new table order

    Every constraint of a brand new table is created.  Otherwise a
    constraint is created if the old table has no constraint with the
    same name, or has one with a different definition.
    """
    conclass = constraint_class(conclass)
    creates = []
    if new_table is None:
        return creates

    for constr in new_table.constraints.values():
        if not conclass.matches(constr):
            continue
        if old_table is None:
            creates.append(constr)
            continue
        oldconstr = old_table.get_constraint(constr.name)
        if oldconstr is None:
            logger.debug("Constraint %s on %s is new", constr.name,
                         new_table.name)
            creates.append(constr)
        elif oldconstr != constr:
            logger.debug("Constraint %s on %s redefined", constr.name,
                         new_table.name)
            creates.append(constr)
    return creates


class ConstraintPlan(namedtuple('ConstraintPlan', ['drops', 'creates'])):
    """The constraints to drop and to create, in that order"""

    __slots__ = ()

    def statements(self):
        """Return the SQL statements carrying out the plan

        :return: list of SQL statements, DROPs before CREATEs
        """
        stmts = []
        for constr in self.drops:
            stmts.extend(constr.drop())
        for constr in self.creates:
            stmts.extend(constr.create())
        return stmts


def _table_pairs(old_schema, new_schema):
    "Pair each table of the new schema with the old table, if any"
    for new_table in new_schema.tables.values():
        if old_schema is None:
            old_table = None
        else:
            old_table = old_schema.get_table(new_table.name)
        yield (old_table, new_table)


def plan_schemas(schema_pairs, classes=DEFAULT_CLASSES):
    """Plan the constraint changes for several schemas

    :param schema_pairs: list of (old schema or None, new schema)
    :param classes: constraint classes, in creation order
    :return: ConstraintPlan

    Drops are planned for the classes in reverse order and creates in
    the given order, so with the default order the other constraints
    (possibly foreign keys referencing a primary key) are dropped
    before and created after the primary keys.
    """
    classes = [constraint_class(cls) for cls in classes]
    plan = ConstraintPlan([], [])
    for conclass in reversed(classes):
        for (old_schema, new_schema) in schema_pairs:
            for (old_table, new_table) in _table_pairs(old_schema,
                                                       new_schema):
                plan.drops.extend(select_drops(old_table, new_table,
                                               conclass))
    for conclass in classes:
        for (old_schema, new_schema) in schema_pairs:
            for (old_table, new_table) in _table_pairs(old_schema,
                                                       new_schema):
                plan.creates.extend(select_creates(old_table, new_table,
                                                   conclass))
    logger.info("%d constraint(s) to drop, %d to create",
                len(plan.drops), len(plan.creates))
    return plan


def plan_constraints(old_schema, new_schema, conclass):
    """Plan the changes of one class of constraints for a schema

    :param old_schema: original schema or None
    :param new_schema: new schema
    :param conclass: class of constraints to consider
    :return: ConstraintPlan
    """
    return plan_schemas([(old_schema, new_schema)], [conclass])


def comment_changes(old_schema, new_schema):
    """Return COMMENT statements for constraints kept as they were

    :param old_schema: original schema or None
    :param new_schema: new schema
    :return: list of SQL statements

    Recreated constraints get their comment when they are added, so
    only constraints with an unchanged definition are considered.
    """
    stmts = []
    for (old_table, new_table) in _table_pairs(old_schema, new_schema):
        if old_table is None:
            continue
        for constr in new_table.constraints.values():
            oldconstr = old_table.get_constraint(constr.name)
            if oldconstr is not None and oldconstr == constr:
                stmts.extend(oldconstr.diff_description(constr))
    return stmts


def _write(writer, stmts):
    if not stmts:
        return False
    print(file=writer)
    for stmt in stmts:
        print("%s;" % stmt, file=writer)
    return True


def drop_constraints(writer, old_schema, new_schema, conclass):
    """Output statements dropping missing or modified constraints

    :param writer: file-like object the output is written to
    :param old_schema: original schema or None
    :param new_schema: new schema
    :param conclass: class of constraints to consider
    :return: number of constraints written
    """
    count = 0
    for (old_table, new_table) in _table_pairs(old_schema, new_schema):
        for constr in select_drops(old_table, new_table, conclass):
            if _write(writer, constr.drop()):
                count += 1
    return count


def create_constraints(writer, old_schema, new_schema, conclass):
    """Output statements creating new or modified constraints

    :param writer: file-like object the output is written to
    :param old_schema: original schema or None
    :param new_schema: new schema
    :param conclass: class of constraints to consider
    :return: number of constraints written
    """
    count = 0
    for (old_table, new_table) in _table_pairs(old_schema, new_schema):
        for constr in select_creates(old_table, new_table, conclass):
            if _write(writer, constr.create()):
                count += 1
    return count
