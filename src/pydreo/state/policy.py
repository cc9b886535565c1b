"""Write policies for cached fields.

Speed is written through: the cache takes the user's request the moment
the command is issued, because the device does not reliably report every
speed change.  Power and oscillation wait for the device to echo them:
only inbound frames may write those fields.
"""

from __future__ import annotations

from enum import StrEnum

from pydreo.state.events import StateField, UpdateSource


class WritePolicy(StrEnum):
    WRITE_THROUGH = "write_through"
    WAIT_FOR_ECHO = "wait_for_echo"


FIELD_POLICIES: dict[StateField, WritePolicy] = {
    StateField.POWER: WritePolicy.WAIT_FOR_ECHO,
    StateField.SPEED: WritePolicy.WRITE_THROUGH,
    StateField.OSCILLATION: WritePolicy.WAIT_FOR_ECHO,
}

_ACK_SOURCES = frozenset({UpdateSource.CONTROL_REPORT, UpdateSource.CONTROL_REPLY})


def write_policy(field: StateField) -> WritePolicy:
    return FIELD_POLICIES[field]


def should_accept_update(field: StateField, source: UpdateSource) -> bool:
    """Decide whether an update from *source* may write *field*.

    Policy:
    - Startup snapshots and unsolicited reports always apply.
    - Optimistic writes apply only to write-through fields.
    - Acks of our own control frames apply only to wait-for-echo fields;
      for write-through fields the cache already holds a newer request.
    """
    policy = write_policy(field)
    if source in (UpdateSource.SNAPSHOT, UpdateSource.REPORT):
        return True
    if source == UpdateSource.OPTIMISTIC:
        return policy == WritePolicy.WRITE_THROUGH
    if source in _ACK_SOURCES:
        return policy == WritePolicy.WAIT_FOR_ECHO
    return False
