from __future__ import annotations

from statemachine import State, StateMachine

from tictactoe_live.api.models import Room, RoomStatus


class RoomFSM(StateMachine):
    """FSM wrapper around a Room's status.

    - waiting -> playing when the second seat fills
    - playing -> finished on a win or draw
    - finished -> playing on rematch
    - any -> waiting when an occupant leaves

    Callers mutate the room; the FSM only guards which status change is legal.
    """

    waiting = State(RoomStatus.waiting.value, value=RoomStatus.waiting.value, initial=True)
    playing = State(RoomStatus.playing.value, value=RoomStatus.playing.value)
    finished = State(RoomStatus.finished.value, value=RoomStatus.finished.value)

    opponent_joined = waiting.to(playing)
    game_over = playing.to(finished)
    rematch = finished.to(playing)
    occupant_lost = waiting.to.itself() | playing.to(waiting) | finished.to(waiting)

    def __init__(self, room: Room):
        self.room = room
        super().__init__(start_value=room.status.value)

    def sync_status_to_model(self) -> None:
        self.room.status = RoomStatus(str(self.current_state.value))
