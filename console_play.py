import asyncio
import logging
import os
import sys

from dotenv import load_dotenv

from connectk.core.settings import load_settings
from connectk.engine.game import InvalidMoveError
from connectk.models.enums import GameStatus
from connectk.services.match_service import MatchService

load_dotenv()


async def main(profile: str = None):
    logging.basicConfig(
        level=os.getenv("CONNECTK_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    settings = load_settings(profile)
    match = MatchService(settings)

    def on_round_over(winner, score):
        # Called before the board is reset for the next round
        print("\n" + match.game.get_visual_board())
        if winner is None:
            print("\nRound drawn.")
        else:
            print(f"\nRound won by {'Human' if winner == match.human_id else 'AI'} (score {score})")

    match.events.subscribe_round_over(on_round_over)

    print("=======================================")
    print(f"   CONNECT {settings.win_length}: Human vs Minimax")
    print(f"   {settings.columns}x{settings.rows}, depth {settings.depth}, first to {settings.score_to_win}")
    print("=======================================")

    print(match.game.get_visual_board())

    while match.get_state().status == GameStatus.IN_PROGRESS:

        # --- Human Turn ---
        if not match.is_ai_turn():
            valid_moves = match.game.get_valid_moves()
            try:
                user_input = await asyncio.to_thread(input, f"\nYour Move (Columns {valid_moves}): ")
            except EOFError:
                print("\nInput closed, leaving the match.")
                return

            try:
                await match.play_human_move(int(user_input))
            except ValueError as e:
                # InvalidMoveError is a ValueError too
                message = str(e) if isinstance(e, InvalidMoveError) else "Please enter a valid number."
                print(message)
                continue

        # --- AI Turn ---
        else:
            print("\nAI is thinking...")
            state = await match.start_ai_turn()
            if state.last_move:
                print(f"AI plays Column: {state.last_move.column} ({state.last_move.nodes_explored} nodes)")

        # Show Board
        print("\n" + match.game.get_visual_board())

    # --- End Match ---
    state = match.get_state()
    winner_name = "Human" if state.match_winner == match.human_id else "AI"
    print(f"\nMatch Over! Winner: {winner_name} {state.scores}")


def run():
    asyncio.run(main(sys.argv[1] if len(sys.argv) > 1 else None))


if __name__ == "__main__":
    run()
