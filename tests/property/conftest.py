"""Hypothesis strategies for property-based testing."""

from hypothesis import strategies as st

from ayahrender.models.render import TEMPLATE_COMPOSITIONS


@st.composite
def generate_unknown_template(draw):
    """Generate template values that do not name a known composition."""
    return draw(st.text(max_size=20).filter(lambda t: t not in TEMPLATE_COMPOSITIONS))


@st.composite
def generate_audio_entry(draw):
    """Generate (url, expected duration) pairs; unreachable hosts and 404s expect None."""
    index = draw(st.integers(min_value=0, max_value=10_000))
    kind = draw(st.sampled_from(["ok", "unreachable", "not_found"]))
    if kind == "unreachable":
        return f"https://unreachable.invalid/{index}.mp3", None
    if kind == "not_found":
        return f"https://cdn.test/404/{index}.mp3", None
    duration = round(draw(st.floats(min_value=0.1, max_value=600.0)), 3)
    return f"https://cdn.test/{duration}/{index}.mp3", duration


@st.composite
def generate_audio_entries(draw, max_size=12):
    return draw(st.lists(generate_audio_entry(), max_size=max_size))
