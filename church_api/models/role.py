"""Member role enum for role-based access control."""

from enum import Enum as PyEnum


class MemberRole(str, PyEnum):
    """
    Church member roles with hierarchical permissions.

    Role Hierarchy (highest to lowest):
    1. ADMINGERAL - General administrator, manages every branch of the church
    2. ADMINFILIAL - Branch administrator, manages members of its own branch
    3. COORDINATOR - Coordinates ministries, edits only its own profile
    4. MEMBER - Regular member, edits only its own profile

    Roles do not imply permissions at check time. ADMINGERAL and ADMINFILIAL
    receive the whole permission catalog when the role is assigned.
    """

    ADMINGERAL = "ADMINGERAL"
    ADMINFILIAL = "ADMINFILIAL"
    COORDINATOR = "COORDINATOR"
    MEMBER = "MEMBER"
