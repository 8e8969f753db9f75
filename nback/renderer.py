"""PIL-based key renderer for the n-back deck."""

from PIL import Image, ImageDraw, ImageFont

from nback.rewards import PlayerRewards
from nback.scoring import TurnResult
from nback.stimuli import Stimulus, StimulusType

SIZE = (96, 96)
FONT_PATH = "/System/Library/Fonts/Helvetica.ttc"
EMOJI_FONT_PATH = "/System/Library/Fonts/Apple Color Emoji.ttc"

EMPTY_COLOR = "#0f172a"
HUD_BG = "#111827"
STIMULUS_BG = "#1e293b"

RESULT_COLORS = {
    TurnResult.CORRECT: "#22c55e",
    TurnResult.INCORRECT: "#ef4444",
    TurnResult.NEUTRAL: "#6b7280",
}


def _font(size: int) -> ImageFont.FreeTypeFont:
    try:
        return ImageFont.truetype(FONT_PATH, size)
    except OSError:
        return ImageFont.load_default()


def _emoji_font() -> ImageFont.FreeTypeFont:
    # Apple Color Emoji only ships bitmap strikes at 160px.
    try:
        return ImageFont.truetype(EMOJI_FONT_PATH, 160)
    except OSError:
        return _font(48)


def result_to_color(result: TurnResult) -> str:
    return RESULT_COLORS.get(result, "#6b7280")


def render_text_button(
    size: tuple[int, int] = SIZE,
    lines: list[str] | None = None,
    bg_color: str = HUD_BG,
    font_sizes: list[int] | None = None,
    colors: list[str] | None = None,
) -> Image.Image:
    """Render a text-only key with up to 4 vertically centered lines."""
    img = Image.new("RGB", size, bg_color)
    if not lines:
        return img

    draw = ImageDraw.Draw(img)
    n = len(lines)
    if not font_sizes:
        font_sizes = {1: [22], 2: [14, 22], 3: [13, 16, 11]}.get(n, [14, 12, 10, 9])
    if not colors:
        colors = ["#9ca3af", "#ffffff", "#aaaaaa", "#888888"][:n]
    font_sizes = list(font_sizes) + [font_sizes[-1]] * (n - len(font_sizes))
    colors = list(colors) + [colors[-1]] * (n - len(colors))

    fonts = [_font(s) for s in font_sizes]
    heights = [f.getbbox("Ag")[3] - f.getbbox("Ag")[1] for f in fonts]
    spacing = 6
    y = (size[1] - sum(heights) - spacing * (n - 1)) // 2
    for i, text in enumerate(lines):
        draw.text((size[0] // 2, y), text, font=fonts[i], fill=colors[i], anchor="mt")
        y += heights[i] + spacing
    return img


# -- stimuli ---------------------------------------------------------------

def _draw_shape(draw: ImageDraw.ImageDraw, shape: str, size: tuple[int, int], color: str):
    w, h = size
    m = 18
    box = [m, m, w - m, h - m]
    if shape == "circle":
        draw.ellipse(box, fill=color)
    elif shape == "square":
        draw.rectangle(box, fill=color)
    elif shape == "triangle":
        draw.polygon([(w // 2, m), (w - m, h - m), (m, h - m)], fill=color)
    elif shape == "diamond":
        draw.polygon([(w // 2, m), (w - m, h // 2), (w // 2, h - m), (m, h // 2)], fill=color)
    else:
        draw.text((w // 2, h // 2), shape[:8], font=_font(16), fill=color, anchor="mm")


def _render_emoji(value: str, size: tuple[int, int]) -> Image.Image:
    font = _emoji_font()
    canvas = Image.new("RGBA", (200, 200), (0, 0, 0, 0))
    ImageDraw.Draw(canvas).text((100, 100), value, font=font, embedded_color=True, anchor="mm")
    inner = (size[0] - 24, size[1] - 24)
    glyph = canvas.resize(inner, Image.LANCZOS)
    img = Image.new("RGB", size, STIMULUS_BG)
    img.paste(glyph, (12, 12), glyph)
    return img


def _render_image(stimulus: Stimulus, size: tuple[int, int]) -> Image.Image:
    img = Image.new("RGB", size, STIMULUS_BG)
    try:
        pic = Image.open(stimulus.value).convert("RGBA")
        pic.thumbnail((size[0] - 8, size[1] - 8), Image.LANCZOS)
        x = (size[0] - pic.width) // 2
        y = (size[1] - pic.height) // 2
        img.paste(pic, (x, y), pic)
    except (FileNotFoundError, OSError):
        label = stimulus.name or "?"
        ImageDraw.Draw(img).text((size[0] // 2, size[1] // 2), label[:10],
                                 font=_font(14), fill="white", anchor="mm")
    return img


def render_stimulus(stimulus: Stimulus, size: tuple[int, int] = SIZE) -> Image.Image:
    """Draw a stimulus so it fills one key."""
    if stimulus.type == StimulusType.COLOR:
        img = Image.new("RGB", size, stimulus.value)
        ImageDraw.Draw(img).rectangle([8, 8, size[0] - 9, size[1] - 9], outline="white", width=2)
        return img
    if stimulus.type == StimulusType.SHAPE:
        img = Image.new("RGB", size, STIMULUS_BG)
        _draw_shape(ImageDraw.Draw(img), stimulus.value, size, "#fbbf24")
        return img
    if stimulus.type == StimulusType.EMOJI:
        return _render_emoji(stimulus.value, size)
    if stimulus.type == StimulusType.IMAGE:
        return _render_image(stimulus, size)

    img = Image.new("RGB", size, STIMULUS_BG)
    text = stimulus.value
    font_size = 56 if len(text) <= 2 else 36 if len(text) <= 4 else 18
    ImageDraw.Draw(img).text((size[0] // 2, size[1] // 2), text[:10],
                             font=_font(font_size), fill="white", anchor="mm")
    return img


def render_empty_cell(size=SIZE) -> Image.Image:
    return Image.new("RGB", size, EMPTY_COLOR)


def render_feedback_cell(result: TurnResult, size=SIZE) -> Image.Image:
    """Flash after an answer: green OK, red X."""
    ok = result == TurnResult.CORRECT
    bg = "#14532d" if ok else "#7f1d1d"
    img = Image.new("RGB", size, bg)
    d = ImageDraw.Draw(img)
    d.text((48, 48), "OK" if ok else "X", font=_font(28), fill=result_to_color(result), anchor="mm")
    return img


# -- HUD -------------------------------------------------------------------

def render_hud_title(size=SIZE) -> Image.Image:
    return render_text_button(size, ["N-BACK", "TRAINER"], font_sizes=[15, 11],
                              colors=["#a78bfa", "#7c3aed"])


def render_hud_level(n: int, size=SIZE) -> Image.Image:
    return render_text_button(size, ["LEVEL", f"{n}-back"], font_sizes=[14, 20],
                              colors=["#9ca3af", "#60a5fa"])


def render_hud_score(score: int, size=SIZE) -> Image.Image:
    return render_text_button(size, ["SCORE", str(score)], font_sizes=[14, 26],
                              colors=["#9ca3af", "#fbbf24"])


def render_hud_turn(turn: int, total: int, size=SIZE) -> Image.Image:
    img = render_text_button(size, ["TURN", f"{turn}/{total}"], font_sizes=[14, 20],
                             colors=["#9ca3af", "#e5e7eb"])
    # progress bar along the bottom edge
    width = int((size[0] - 16) * min(1.0, turn / total)) if total else 0
    d = ImageDraw.Draw(img)
    d.rectangle([8, size[1] - 10, size[0] - 8, size[1] - 6], fill="#1f2937")
    if width:
        d.rectangle([8, size[1] - 10, 8 + width, size[1] - 6], fill="#a78bfa")
    return img


def render_hud_streak(streak: int, size=SIZE) -> Image.Image:
    color = "#f97316" if streak > 1 else "#a78bfa"
    return render_text_button(size, ["STREAK", f"x{streak}"], font_sizes=[12, 22],
                              colors=["#9ca3af", color])


def render_hud_best(best: int, size=SIZE) -> Image.Image:
    return render_text_button(size, ["BEST", str(best) if best > 0 else "--"],
                              font_sizes=[14, 26], colors=["#9ca3af", "#34d399"])


def render_hud_rewards(rewards: PlayerRewards, size=SIZE) -> Image.Image:
    return render_text_button(
        size,
        [f"* {rewards.stars}", f"<> {rewards.gems}", f"T {rewards.trophies}", f"P {rewards.perfect_scores}"],
        font_sizes=[13],
        colors=["#fbbf24", "#38bdf8", "#f59e0b", "#f472b6"],
    )


def render_hud_empty(size=SIZE) -> Image.Image:
    return Image.new("RGB", size, HUD_BG)


# -- controls --------------------------------------------------------------

def render_match_button(active: bool, size=SIZE) -> Image.Image:
    """MATCH button: green when an answer is accepted, gray otherwise."""
    bg, fg = ("#065f46", "#4ade80") if active else ("#1f2937", "#4b5563")
    return render_text_button(size, ["MATCH!"], bg_color=bg, font_sizes=[17], colors=[fg])


def render_no_match_button(active: bool, size=SIZE) -> Image.Image:
    bg, fg = ("#7c2d12", "#fdba74") if active else ("#1f2937", "#4b5563")
    return render_text_button(size, ["NO", "MATCH"], bg_color=bg, font_sizes=[15, 15], colors=[fg, fg])


def render_pause_button(paused: bool, size=SIZE) -> Image.Image:
    label = "RESUME" if paused else "PAUSE"
    bg = "#1d4ed8" if paused else "#374151"
    return render_text_button(size, [label], bg_color=bg, font_sizes=[15], colors=["#e5e7eb"])


def render_exit_button(size=SIZE) -> Image.Image:
    return render_text_button(size, ["EXIT"], bg_color="#374151", font_sizes=[15], colors=["#fbbf24"])


def render_start(size=SIZE) -> Image.Image:
    return render_text_button(size, ["PRESS", "START"], bg_color="#065f46",
                              font_sizes=[16, 16], colors=["white", "#34d399"])


def render_countdown(value: int, size=SIZE) -> Image.Image:
    return render_text_button(size, [str(value)], bg_color="#4c1d95", font_sizes=[48], colors=["#c4b5fd"])


def render_paused(size=SIZE) -> Image.Image:
    return render_text_button(size, ["PAUSED"], bg_color="#1e3a8a", font_sizes=[16], colors=["#bfdbfe"])


def render_review_label(n: int, size=SIZE) -> Image.Image:
    return render_text_button(size, ["LAST", str(n)], bg_color="#7f1d1d", font_sizes=[14, 22],
                              colors=["#fecaca", "white"])


# -- game over -------------------------------------------------------------

def render_game_over(size=SIZE) -> Image.Image:
    return render_text_button(size, ["GAME", "OVER"], bg_color="#7c2d12",
                              font_sizes=[18, 18], colors=["white", "white"])


def render_final_score(score: int, size=SIZE) -> Image.Image:
    return render_text_button(size, ["FINAL", str(score)], font_sizes=[12, 28],
                              colors=["#9ca3af", "#fbbf24"])


def render_reward_tile(label: str, count: int, color: str, size=SIZE) -> Image.Image:
    """One reward tier on the summary screen, e.g. "+2 GEMS"."""
    return render_text_button(size, [label, f"+{count}"], font_sizes=[12, 26], colors=["#9ca3af", color])


def render_new_best(size=SIZE) -> Image.Image:
    return render_text_button(size, ["NEW", "BEST!"], font_sizes=[14, 18], colors=["#fbbf24", "#fbbf24"])


def render_achievement(emoji: str, name: str, size=SIZE) -> Image.Image:
    img = Image.new("RGB", size, "#4c1d95")
    d = ImageDraw.Draw(img)
    d.text((48, 20), "UNLOCKED", font=_font(11), fill="#c4b5fd", anchor="mt")
    words = name.split()
    d.text((48, 44), " ".join(words[:2])[:12], font=_font(13), fill="white", anchor="mt")
    if len(words) > 2:
        d.text((48, 62), " ".join(words[2:])[:12], font=_font(13), fill="white", anchor="mt")
    return img
