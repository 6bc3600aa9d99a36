"""
One-time dialog flags, stored on the user.

They are cleared on every sign-in and on sign-out, so each flag fires at
most once per login whether the client carries a session cookie or only
a bearer token.
"""
JOB_TARGETS_INFO = "seen_job_targets_info"


def has_seen(user, flag: str) -> bool:
    return bool((user.onboarding_flags or {}).get(flag))


def mark_seen(user, flag: str) -> None:
    flags = dict(user.onboarding_flags or {})
    flags[flag] = True
    user.onboarding_flags = flags
    user.save(update_fields=["onboarding_flags"])


def consume(user, flag: str) -> bool:
    """True the first time `flag` is asked for since login, False afterwards."""
    if has_seen(user, flag):
        return False
    mark_seen(user, flag)
    return True


def welcome_flag(role: str) -> str:
    return f"seen_welcome_{(role or '').lower()}"


def reset(user) -> None:
    if user.onboarding_flags:
        user.onboarding_flags = {}
        user.save(update_fields=["onboarding_flags"])
