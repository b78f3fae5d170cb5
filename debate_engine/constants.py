"""Host-authored text and fixed limits used across the debate engine."""

MIN_PARTICIPANTS = 2
MAX_PARTICIPANTS = 6
MAX_TOPIC_LENGTH = 200

MIN_ROUNDS = 3
MAX_ROUNDS = 7
DEFAULT_ROUNDS = 3

MIN_CIVILITY = 1
MAX_CIVILITY = 5
DEFAULT_CIVILITY = 3

MAX_PROMPT_LENGTH = 4000
PREVIOUS_SPEAKER_MARKER = "Previous speaker said: "


def debate_start_message(topic: str) -> str:
    return f'Welcome to the debate! Today\'s motion: "{topic}"'


def round_start_message(round_number: int) -> str:
    return f"Round {round_number} begins!"


FINAL_ROUND_MESSAGE = "Final round! Make your closing arguments count."

DEBATE_COMPLETE_MESSAGE = (
    "The debate is complete! Please vote on the final round to decide the winner."
)


def round_voting_prompt(label: str) -> str:
    return f"Who won {label}?"


FINAL_ROUND_VOTING_PROMPT = "Who won the final round?"
OVERALL_VOTING_PROMPT = "Who won the debate overall?"


def round_winner_message(label: str, winner_name: str) -> str:
    return f"{winner_name} wins {label}!"


def final_round_winner_message(winner_name: str) -> str:
    return f"{winner_name} wins the final round!"


def overall_winner_message(winner_name: str, round_wins: int, total_rounds: int) -> str:
    return (
        f"**OVERALL WINNER: {winner_name}!**\n\n"
        f"{winner_name} won {round_wins} out of {total_rounds} rounds!"
    )


def tie_message(names: list[str], round_wins: int) -> str:
    noun = "round" if round_wins == 1 else "rounds"
    joined = " and ".join(names)
    subject = "both" if len(names) == 2 else "all"
    return f"**DEBATE ENDED IN A TIE!**\n\n{joined} {subject} won {round_wins} {noun}!"


def rate_limit_message(speaker_name: str) -> str:
    return f"{speaker_name} is being rate limited. Moving on to the next speaker shortly."


def error_message(speaker_name: str) -> str:
    return f"{speaker_name} encountered an error and could not respond this turn."
