"""
Filter-to-query translation for the log report.

Turns FilterOptions into a parameter-bound Predicate that a LogReader
can count and iterate. Clause order follows the report's filter order;
it does not affect which rows match.
"""

import logging
from typing import Any

from ..config.constants import (
    ALL_CRUD,
    ALL_EDULEVELS,
    CONTEXT_MODULE,
    CORE_ORIGINS,
    DAYSECS,
    SITE_ERROR_ACTIONS,
    SITEID,
)
from ..exceptions import InvalidFilterError
from ..logstore import GroupMembership, StoreKind
from .filters import FilterOptions
from .predicate import LIKE_ESCAPE_CHAR, Predicate, escape_like

logger = logging.getLogger(__name__)

# Legacy action filter meaning "every change, no views"
LEGACY_NOT_VIEW = "-view"


class LogQueryTranslator:
    """
    Builds log report predicates from filter options.

    Group filters are resolved through the injected GroupMembership at
    build time, so a predicate is a point-in-time snapshot of the group.
    """

    def __init__(self, group_membership: GroupMembership, site_id: int = SITEID):
        """
        Initialize the translator.

        Args:
            group_membership: Lookup used to expand group filters
            site_id: Course id that stands for the whole site
        """
        self._groups = group_membership
        self._site_id = site_id

    @staticmethod
    def uses_extended_index(options: FilterOptions) -> bool:
        """
        True when user and module filters can use the composite index.

        The composite index also covers crud and edulevel, so those
        columns get constrained too even when the caller left them open.
        """
        return (
            options.log_reader.has_extended_index_benefit
            and bool(options.user_id)
            and bool(options.module_id)
        )

    def build_predicate(self, options: FilterOptions) -> Predicate:
        """
        Translate filter options into a predicate.

        Args:
            options: Filters for this request

        Returns:
            Predicate whose ``where`` and ``params`` go to the log reader

        Raises:
            InvalidFilterError: If a filter value cannot be expressed
        """
        reader = options.log_reader
        use_extended_index = self.uses_extended_index(options)
        predicate = Predicate()

        # A group is only meaningful within a concrete course
        group_id = None
        if options.course_id and options.course_id != self._site_id:
            if options.group_id:
                group_id = options.group_id
            predicate.add("courseid = :courseid", {"courseid": options.course_id})

        if options.site_errors:
            predicate.add_in("action", SITE_ERROR_ACTIONS, prefix="siteerror")

        if options.module_id:
            predicate.extend(*self.module_sql(options))

        if options.action or use_extended_index:
            predicate.extend(*self.action_sql(options, predicate))

        if group_id and not options.user_id:
            members = self._groups.members_of(group_id)
            if members:
                predicate.add_in("userid", sorted(members), prefix="groupmember")
            else:
                predicate.add_false()
        elif options.user_id:
            predicate.add("userid = :userid", {"userid": options.user_id})

        if options.date:
            predicate.add(
                "timecreated > :date AND timecreated < :enddate",
                {"date": options.date, "enddate": options.date + DAYSECS},
            )

        if options.has_edulevel:
            predicate.add("edulevel = :edulevel", {"edulevel": int(options.edulevel)})
        elif use_extended_index:
            predicate.add_in("edulevel", ALL_EDULEVELS, prefix="edulevel")

        if options.origin:
            if options.wants_other_origins:
                predicate.add_in("origin", CORE_ORIGINS, prefix="origin", equal=False)
            else:
                predicate.add("origin = :origin", {"origin": options.origin})

        # Legacy stores never record anonymous events
        if reader.supports_anonymous:
            predicate.add("anonymous = 0")

        if options.search != "":
            predicate.add_like("eventname", options.search, "search")

        logger.debug(f"Built log predicate: {predicate.where} {predicate.params}")
        return predicate

    # =========================================================================
    # Clause helpers
    # =========================================================================

    def module_sql(self, options: FilterOptions) -> tuple[str, dict[str, Any]]:
        """Clause restricting events to one course module."""
        if options.log_reader.kind is StoreKind.LEGACY:
            return "cmid = :cmid", {"cmid": options.module_id}

        return (
            "contextinstanceid = :contextinstanceid AND contextlevel = :contextmodule",
            {"contextinstanceid": options.module_id, "contextmodule": CONTEXT_MODULE},
        )

    def action_sql(
        self, options: FilterOptions, predicate: Predicate
    ) -> tuple[str, dict[str, Any]]:
        """
        Clause restricting events by action.

        The standard store filters on CRUD letters ("c", "r", "u", "d" or a
        combination such as "cud"); with no action and the extended index
        in use, all four letters are listed. The legacy store matches its
        free-text action column instead.

        Raises:
            InvalidFilterError: If a standard action has non-CRUD letters
        """
        action = options.action or ""

        if options.log_reader.kind is StoreKind.LEGACY:
            if action == LEGACY_NOT_VIEW:
                return "action NOT LIKE :action", {"action": "%view%"}
            return (
                f"action LIKE :action ESCAPE '{LIKE_ESCAPE_CHAR}'",
                {"action": f"%{escape_like(action)}%"},
            )

        if action:
            letters = list(dict.fromkeys(action))
            invalid = [letter for letter in letters if letter not in ALL_CRUD]
            if invalid:
                raise InvalidFilterError(
                    "Action must be a combination of c, r, u, d",
                    field="action",
                    value=action,
                )
        else:
            letters = list(ALL_CRUD)

        return predicate.in_clause("crud", letters, prefix="crud")
