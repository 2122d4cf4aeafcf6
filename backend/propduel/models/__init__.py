from propduel.models.custom_bet import CustomBet, CustomBetParticipant
from propduel.models.enums import BetStatus, Outcome, PickType
from propduel.models.pick import Pick
from propduel.models.user import User

__all__ = ["User", "CustomBet", "CustomBetParticipant", "Pick", "BetStatus", "Outcome", "PickType"]
