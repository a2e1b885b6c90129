"""
Which properties a user may see.

Staff (admin and normal users) see every property. A customer sees a
property when one of its tags names a group the customer belongs to, or is
the customer's own email address.
"""
from typing import List, Set

from .models import Document, EmailTag, GroupTag, Property, User, VisibilityTag


def customer_tags(document: Document, user: User) -> Set[VisibilityTag]:
    tags: Set[VisibilityTag] = {EmailTag(user.email)}
    for group_id in document.group_ids_for(user.id):
        group = document.find_group(group_id)
        if group is not None:
            tags.add(GroupTag(group.name))
    return tags


def can_view(document: Document, user: User, apartment: Property) -> bool:
    if not user.is_customer:
        return True
    tags = customer_tags(document, user)
    return any(tag in tags for tag in apartment.groups)


def visible_properties(document: Document, user: User) -> List[Property]:
    if not user.is_customer:
        return list(document.apartments)
    tags = customer_tags(document, user)
    return [a for a in document.apartments if any(t in tags for t in a.groups)]


def properties_in_group(document: Document, group_name: str) -> List[Property]:
    tag = GroupTag(group_name)
    return [a for a in document.apartments if tag in a.groups]

