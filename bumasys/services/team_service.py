"""
Team Service: cross-department teams and their membership.

Rules:
    - team name is unique case-insensitively
    - lead_id, when set, must be an existing staff member
    - deletion is blocked while the team has members
    - a staff member joins a team at most once; each membership carries
      a free-text member_role
"""

import logging

from bumasys.core.exceptions import ConflictError, InvalidReferenceError, NotFoundError
from bumasys.services.base import EntityService
from bumasys.services.helpers.references import find_by_id, require_reference
from bumasys.services.helpers.uniqueness import ensure_unique
from bumasys.store.base import STAFF, TEAM_MEMBERS, TEAMS
from bumasys.utils.helpers import new_id

logger = logging.getLogger(__name__)


class TeamService(EntityService):
    collection = TEAMS
    entity = "Team"
    fields = ("name", "description", "lead_id")
    required = ("name",)

    def find_by_name(self, name: str) -> dict | None:
        wanted = name.casefold()
        for team in self._records():
            if team.get("name", "").casefold() == wanted:
                return dict(team)
        return None

    def get_by_lead(self, lead_id: str) -> list[dict]:
        return self.get_all(lead_id=lead_id)

    def _check_lead(self, lead_id) -> None:
        if lead_id is not None:
            require_reference(self._records(STAFF), lead_id, "Team lead not found")

    def create(self, data: dict) -> dict:
        record = self._new_record(data)
        ensure_unique(self._records(), "name", record["name"], case_sensitive=False,
                      message="Team name already in use")
        self._check_lead(record["lead_id"])
        return self._insert(record)

    def update(self, data: dict) -> dict:
        team = self._require(data.get("id"))
        changes = self._changes(data)
        if "name" in changes:
            ensure_unique(self._records(), "name", changes["name"], case_sensitive=False,
                          message="Team name already in use", exclude_id=team["id"])
        if "lead_id" in changes:
            self._check_lead(changes["lead_id"])
        return self._save(team, changes)

    def _ensure_deletable(self, record: dict) -> None:
        self.guard.ensure_team_deletable(record["id"])

    def get_with_stats(self) -> list[dict]:
        """Teams with member_count and the lead's display name."""
        members = self._records(TEAM_MEMBERS)
        staff = self._records(STAFF)
        result = []
        for team in self.get_all():
            team["member_count"] = sum(1 for m in members if m["team_id"] == team["id"])
            lead = find_by_id(staff, team.get("lead_id"))
            team["lead_name"] = f"{lead['first_name']} {lead['last_name']}" if lead else None
            result.append(team)
        return result

    # ── Members ──────────────────────────────────────────────────────────

    def _members(self) -> list[dict]:
        return self._records(TEAM_MEMBERS)

    def get_members(self, team_id: str) -> list[dict]:
        return [dict(m) for m in self._members() if m["team_id"] == team_id]

    def get_staff_teams(self, staff_id: str) -> list[dict]:
        return [dict(m) for m in self._members() if m["staff_id"] == staff_id]

    def find_member_by_id(self, member_id: str) -> dict | None:
        member = find_by_id(self._members(), member_id)
        return dict(member) if member is not None else None

    def add_member(self, data: dict) -> dict:
        self._check_required(data, ("team_id", "staff_id"))
        team_id, staff_id = data["team_id"], data["staff_id"]
        if self._get(team_id) is None:
            raise InvalidReferenceError("Team not found")
        require_reference(self._records(STAFF), staff_id, "Staff member not found")
        if any(m["team_id"] == team_id and m["staff_id"] == staff_id for m in self._members()):
            raise ConflictError("Staff member is already a member of this team")
        member = {
            "id": new_id(),
            "team_id": team_id,
            "staff_id": staff_id,
            "member_role": data.get("member_role"),
        }
        self._members().append(member)
        self.store.persist()
        logger.info("Team member added",
                    extra={"operation": "add_member", "entity_id": team_id, "staff_id": staff_id})
        return dict(member)

    def update_member(self, data: dict) -> dict:
        member = find_by_id(self._members(), data.get("id"))
        if member is None:
            raise NotFoundError("Team member not found", details={"id": data.get("id")})
        if "member_role" in data:
            member["member_role"] = data["member_role"]
        self.store.persist()
        logger.info("Team member updated",
                    extra={"operation": "update_member", "entity_id": member["id"]})
        return dict(member)

    def remove_member(self, member_id: str) -> bool:
        member = find_by_id(self._members(), member_id)
        if member is None:
            return False
        self._members().remove(member)
        self.store.persist()
        logger.info("Team member removed",
                    extra={"operation": "remove_member", "entity_id": member_id})
        return True

    def remove_staff_from_team(self, team_id: str, staff_id: str) -> bool:
        for member in self._members():
            if member["team_id"] == team_id and member["staff_id"] == staff_id:
                return self.remove_member(member["id"])
        return False
