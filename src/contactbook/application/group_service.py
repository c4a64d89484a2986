"""Contact groups: create, list, update, delete."""

from dataclasses import replace

from contactbook.application.dto import (
    GroupData,
    GroupDeleted,
    GroupNotFound,
    GroupView,
    Invalid,
)
from contactbook.application.ports import ContactRepository, GroupRepository
from contactbook.domain import Group


class GroupService:
    """Groups reference contacts by id. Ids that are not the owner's contacts are dropped."""

    def __init__(self, repository: GroupRepository, contacts: ContactRepository) -> None:
        self._repo = repository
        self._contacts = contacts

    def create_group(self, owner_id: str, data: GroupData) -> GroupView | Invalid:
        name = (data.name or "").strip()
        if not name:
            return Invalid(reason="Group name is required.")
        group = Group(
            owner_id=owner_id,
            name=name,
            description=(data.description or "").strip() or None,
            member_ids=tuple(self._known_ids(owner_id, data.member_ids or [])),
        )
        self._repo.add(group)
        return self._view(group)

    def list_groups(self, owner_id: str) -> list[GroupView]:
        return [self._view(group) for group in self._repo.list_all(owner_id)]

    def update_group(
        self, owner_id: str, group_id: str, data: GroupData
    ) -> GroupView | GroupNotFound | Invalid:
        """Change name, description and/or members. None leaves a field as is."""
        current = self._repo.get_by_id(owner_id, group_id)
        if current is None:
            return GroupNotFound(group_id=group_id)
        if data.name is not None and not data.name.strip():
            return Invalid(reason="Group name must be non-empty.")

        updated = replace(
            current,
            name=data.name.strip() if data.name is not None else current.name,
            description=(
                (data.description.strip() or None)
                if data.description is not None
                else current.description
            ),
            member_ids=(
                tuple(self._known_ids(owner_id, data.member_ids))
                if data.member_ids is not None
                else current.member_ids
            ),
        )
        if not self._repo.update(updated):
            return GroupNotFound(group_id=group_id)
        return self._view(updated)

    def delete_group(self, owner_id: str, group_id: str) -> GroupDeleted | GroupNotFound:
        if not self._repo.delete(owner_id, group_id):
            return GroupNotFound(group_id=group_id)
        return GroupDeleted(group_id=group_id)

    def _known_ids(self, owner_id: str, member_ids: list[str]) -> list[str]:
        return [
            cid for cid in member_ids if self._contacts.get_by_id(owner_id, cid) is not None
        ]

    def _view(self, group: Group) -> GroupView:
        members = []
        for cid in group.member_ids:
            contact = self._contacts.get_by_id(group.owner_id, cid)
            if contact is not None:
                members.append(contact)
        return GroupView(group=group, members=members)
