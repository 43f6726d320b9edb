"""
Arcana Battler Web App
Streamlit interface for playing battles and running simulations.
"""

import streamlit as st

from arcana_battler.engine.game import Battle, DeclineReason
from arcana_battler.presets import PRESETS, get_preset
from arcana_battler.simulator import Simulator

DECLINE_MESSAGES = {
    DeclineReason.INVALID_SELECTION: "Select between 1 and 5 cards.",
    DeclineReason.NO_DISCARDS: "No discards left this round.",
    DeclineReason.STALE_INDEX: "That card is no longer in your hand.",
    DeclineReason.BUSY: "Still resolving the last hand.",
}

SUIT_ICONS = {"Swords": "⚔️", "Cups": "🏆", "Pentacles": "🪙", "Wands": "🪄"}

# Page config
st.set_page_config(
    page_title="Arcana Battler",
    page_icon="🃏",
    layout="wide"
)

st.title("🃏 Arcana Battler")
st.markdown("*Poker hands, tarot suits, one enemy at a time*")

# Sidebar for settings
st.sidebar.header("Settings")

preset_options = list(PRESETS.keys())
selected_preset = st.sidebar.selectbox(
    "Preset",
    options=preset_options,
    format_func=lambda x: PRESETS[x].name
)
st.sidebar.markdown(f"*{PRESETS[selected_preset].description}*")

new_run_clicked = st.sidebar.button("New Run")

if "battle" not in st.session_state or st.session_state.get("preset") != selected_preset:
    st.session_state.battle = Battle(get_preset(selected_preset).build_config(),
                                     preset_name=selected_preset)
    st.session_state.preset = selected_preset
    st.session_state.message = None

battle: Battle = st.session_state.battle

if new_run_clicked:
    battle.new_run()
    st.session_state.message = None


def report(result):
    """Remember what the last action did for the next render."""
    if not result.accepted:
        st.session_state.message = DECLINE_MESSAGES[result.reason]
    elif result.round:
        rnd = result.round
        st.session_state.message = (
            f"{rnd.evaluation.label} (x{rnd.evaluation.multiplier}): dealt {rnd.effects.damage}, "
            f"took {rnd.damage_taken} - {rnd.outcome.value.replace('_', ' ')}"
        )
    else:
        st.session_state.message = None


play_tab, sim_tab = st.tabs(["Play", "Simulate"])

with play_tab:
    snap = battle.snapshot()

    # Top-level metrics
    col1, col2, col3, col4, col5 = st.columns(5)
    with col1:
        st.metric("Health", f"{snap.player.health}/{snap.player.max_health}")
    with col2:
        st.metric("Pentacles", snap.player.pentacles)
    with col3:
        st.metric(f"{snap.current_enemy.name} ({snap.enemy_index + 1}/{snap.enemy_count})",
                  f"{snap.current_enemy.health} hp")
    with col4:
        st.metric("Enemy attack", snap.current_enemy.damage)
    with col5:
        st.metric("Deck", snap.deck_count)

    if st.session_state.message:
        st.info(st.session_state.message)

    st.subheader(f"Run {snap.run} - Round {snap.round}")

    # Hand
    card_cols = st.columns(max(len(snap.hand), 1))
    for i, card in enumerate(snap.hand):
        with card_cols[i]:
            icon = SUIT_ICONS.get(card.suit, "✨")
            marker = "✅ " if card.selected else ""
            if st.button(f"{marker}{icon} {card.label}", key=f"card_{card.id}",
                         help=card.description or None, use_container_width=True):
                report(battle.toggle_selection(i))
                st.rerun()

    preview = snap.last_evaluation
    if preview:
        effects = preview.by_suit()
        st.markdown(
            f"**{preview.label}** (x{preview.evaluation.multiplier}) - "
            + " · ".join(f"{SUIT_ICONS[s]} {v}" for s, v in effects.items())
        )

    # Actions
    act1, act2 = st.columns(2)
    with act1:
        if st.button(f"Discard ({snap.discards_remaining} left)", use_container_width=True):
            report(battle.discard())
            st.rerun()
    with act2:
        if st.button("Play Hand", type="primary", use_container_width=True):
            report(battle.play())
            st.rerun()

    with st.expander("Battle log"):
        st.json(battle.history.to_dict()["summary"])
        if snap.last_round:
            for line in snap.last_round.effects.details:
                st.text(line)

with sim_tab:
    num_runs = st.slider("Number of Runs", min_value=10, max_value=500, value=100, step=10)
    seed = st.number_input("Seed", min_value=0, value=0, step=1)

    if st.button("🎲 Run Simulation", type="primary", use_container_width=True):
        with st.spinner("Running simulation..."):
            batch = Simulator(seed=int(seed)).run_batch(selected_preset, runs=num_runs)

        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("Win Rate", f"{batch.win_rate:.1f}%")
        with col2:
            st.metric("Avg Rounds", f"{batch.avg_rounds:.1f}")
        with col3:
            st.metric("Avg Enemies Defeated", f"{batch.avg_enemies_defeated:.2f}")

        st.bar_chart(batch.hand_type_distribution)
