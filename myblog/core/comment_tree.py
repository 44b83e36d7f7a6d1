"""
Builds the two-tier comment display structure for a post page.

Comments are fetched flat, in three independent batches: the top-level
window, the direct replies to those comments, and the replies to those
direct replies. This module turns the batches into ``CommentGroup`` values:
each top-level comment owns one reply list that merges both reply tiers,
newest first. Second-tier replies are not nested further; they carry the id
and author of the direct reply they answer instead.

Everything here is a pure function of its arguments. Input records are
never mutated and repeated calls on identical input give equal output.
"""
from typing import Iterable, Mapping, Optional, Sequence

from myblog.schemas.comment_schema import (
    AuthorProfile,
    CommentGroup,
    CommentRecord,
    ReplyItem,
)

PLACEHOLDER_PROFILE = AuthorProfile(nickname="Unknown", avatar_url=None)


def resolve_profile(
    profiles_by_id: Mapping[str, AuthorProfile],
    user_id: str,
) -> AuthorProfile:
    return profiles_by_id.get(user_id) or PLACEHOLDER_PROFILE


def _display_fields(
    record: CommentRecord,
    profiles_by_id: Mapping[str, AuthorProfile],
    liked_ids: frozenset,
    viewer_id: Optional[str],
    reply_target_id: str,
) -> dict:
    is_deleted = record.deleted_at is not None
    is_own = viewer_id is not None and record.user_id == viewer_id

    fields = record.model_dump()
    if is_deleted:
        fields["content"] = ""

    fields.update(
        author=resolve_profile(profiles_by_id, record.user_id),
        liked=record.id in liked_ids,
        is_deleted=is_deleted,
        can_edit=is_own and not is_deleted,
        can_delete=is_own and not is_deleted,
        can_reply=viewer_id is not None and not is_deleted,
        reply_target_id=reply_target_id,
    )
    return fields


def sort_replies(replies: Iterable[ReplyItem]) -> list[ReplyItem]:
    """Newest first; equal timestamps fall back to ascending id."""
    by_id = sorted(replies, key=lambda r: r.id)
    return sorted(by_id, key=lambda r: r.created_at, reverse=True)


def assemble_comment_groups(
    top_level: Sequence[CommentRecord],
    direct_replies: Iterable[CommentRecord],
    nested_replies: Iterable[CommentRecord],
    profiles_by_id: Mapping[str, AuthorProfile],
    liked_ids: Iterable[str] = (),
    viewer_id: Optional[str] = None,
) -> list[CommentGroup]:
    """
    Assemble one page of comments into display groups.

    Args:
        top_level: the page window, already ordered newest first
        direct_replies: every reply whose parent is in ``top_level``
        nested_replies: every reply whose parent is in ``direct_replies``
        profiles_by_id: author id -> profile; missing ids get a placeholder
        liked_ids: ids of comments the viewer has liked
        viewer_id: current user id, or None when anonymous

    Replies whose parent chain does not resolve inside this page are left
    out. Duplicate ids are passed through as given.
    """
    liked = frozenset(liked_ids)
    direct_replies = list(direct_replies)
    nested_replies = list(nested_replies)

    direct_by_parent: dict[str, list[CommentRecord]] = {}
    for reply in direct_replies:
        direct_by_parent.setdefault(reply.parent_id, []).append(reply)

    nested_by_parent: dict[str, list[CommentRecord]] = {}
    for reply in nested_replies:
        nested_by_parent.setdefault(reply.parent_id, []).append(reply)

    groups = []
    for comment in top_level:
        merged = []

        for direct in direct_by_parent.get(comment.id, []):
            merged.append(ReplyItem(**_display_fields(
                direct, profiles_by_id, liked, viewer_id,
                reply_target_id=direct.id,
            )))

            for nested in nested_by_parent.get(direct.id, []):
                merged.append(ReplyItem(
                    **_display_fields(
                        nested, profiles_by_id, liked, viewer_id,
                        # a third tier is never fetched, answer the direct reply
                        reply_target_id=direct.id,
                    ),
                    reply_to_id=direct.id,
                    reply_to_author=resolve_profile(profiles_by_id, direct.user_id),
                ))

        groups.append(CommentGroup(
            **_display_fields(
                comment, profiles_by_id, liked, viewer_id,
                reply_target_id=comment.id,
            ),
            replies=sort_replies(merged),
        ))

    return groups

