"""Side panel renderer: daily progress chart and goal list."""

import logging
from pathlib import Path
from typing import Optional

from PIL import Image, ImageDraw, ImageFont

from writing_tracker.goals.events import GoalsSnapshot, NotificationBus
from writing_tracker.goals.models import Goal

logger = logging.getLogger(__name__)

PROGRESS_COLOR = "#36a2eb"
REMAINING_COLOR = "#e0e0e0"
TEXT_COLOR = "#222222"


class DashboardRenderer:
    """Renders the writing tracker panel to a PNG image."""

    def __init__(self, output_dir: str = "static/images", filename: str = "writing-tracker"):
        """
        Initialize renderer.

        Args:
            output_dir: Directory to save generated images
            filename: Image name without extension, overwritten on each render
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.filename = filename

        # Try to load fonts, fall back to default
        self.fonts = self._load_fonts()

    def _load_fonts(self) -> dict:
        """Load fonts for rendering."""
        fonts = {}

        # Try to find system fonts
        font_paths = [
            "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
            "/System/Library/Fonts/Helvetica.ttc",  # macOS
        ]

        try:
            for path in font_paths:
                if Path(path).exists():
                    fonts["header"] = ImageFont.truetype(path, 22)
                    fonts["title"] = ImageFont.truetype(path, 16)
                    fonts["normal"] = ImageFont.truetype(path, 14)
                    fonts["small"] = ImageFont.truetype(path, 12)
                    logger.info(f"Loaded fonts from {path}")
                    break
        except OSError as e:
            logger.warning(f"Could not load TrueType fonts: {e}, using default")
            fonts = {}

        # Fall back to default fonts
        if not fonts:
            default_font = ImageFont.load_default()
            fonts["header"] = default_font
            fonts["title"] = default_font
            fonts["normal"] = default_font
            fonts["small"] = default_font

        return fonts

    def render(self, goals: GoalsSnapshot, width: int = 400) -> tuple[str, str]:
        """
        Render the panel.

        Args:
            goals: (path, goal) pairs to show
            width: Image width; height grows with the number of goals

        Returns:
            Tuple of (filename, file_path)
        """
        logger.info(f"Rendering writing tracker panel with {len(goals)} goals")

        chart_size = min(width - 80, 240)
        list_top = 80 + chart_size + 40
        height = list_top + max(len(goals), 1) * 90 + 20

        image = Image.new("RGB", (width, height), "white")
        draw = ImageDraw.Draw(image)

        draw.text((20, 15), "Writing Tracker", fill=TEXT_COLOR, font=self.fonts["header"])
        draw.line([20, 50, width - 20, 50], fill=TEXT_COLOR, width=2)

        self._draw_chart(draw, goals, width, top=60, size=chart_size)
        self._draw_goals(draw, goals, width, top=list_top)

        file_path = self.output_dir / f"{self.filename}.png"
        image.save(file_path, "PNG")
        logger.info(f"Saved panel to {file_path}")

        return self.filename, str(file_path)

    def _draw_chart(self, draw: ImageDraw.ImageDraw, goals: GoalsSnapshot, width: int, top: int, size: int):
        """Draw the daily progress pie with title and legend."""
        progress = total_daily_progress(goals)
        target = total_daily_goal(goals)

        title = "Daily Progress"
        bbox = draw.textbbox((0, 0), title, font=self.fonts["title"])
        draw.text(((width - (bbox[2] - bbox[0])) / 2, top), title, fill=TEXT_COLOR, font=self.fonts["title"])

        # Legend
        legend_y = top + 25
        legend_x = width / 2 - 90
        legend = [
            (PROGRESS_COLOR, f"Progress {progress}"),
            (REMAINING_COLOR, f"Remaining {max(target - progress, 0)}"),
        ]
        for color, label in legend:
            draw.rectangle([legend_x, legend_y + 2, legend_x + 12, legend_y + 14], fill=color)
            draw.text((legend_x + 18, legend_y), label, fill=TEXT_COLOR, font=self.fonts["small"])
            legend_x += 100

        x0 = (width - size) / 2
        y0 = top + 50
        box = [x0, y0, x0 + size, y0 + size]

        fraction = progress_fraction(progress, target)
        draw.ellipse(box, fill=REMAINING_COLOR)
        if fraction >= 1:
            draw.ellipse(box, fill=PROGRESS_COLOR)
        elif fraction > 0:
            # Pillow angles start at 3 o'clock; start the slice at 12 o'clock
            draw.pieslice(box, start=-90, end=-90 + 360 * fraction, fill=PROGRESS_COLOR)

        if target == 0:
            text = "No daily goal"
            bbox = draw.textbbox((0, 0), text, font=self.fonts["normal"])
            draw.text(
                (x0 + (size - (bbox[2] - bbox[0])) / 2, y0 + size / 2 - 8),
                text,
                fill=TEXT_COLOR,
                font=self.fonts["normal"],
            )

    def _draw_goals(self, draw: ImageDraw.ImageDraw, goals: GoalsSnapshot, width: int, top: int):
        """Draw one row per goal."""
        draw.line([20, top - 15, width - 20, top - 15], fill=TEXT_COLOR, width=1)

        if not goals:
            draw.text((20, top), "No writing goals yet", fill=TEXT_COLOR, font=self.fonts["normal"])
            return

        y = top
        for path, goal in goals:
            self._draw_goal_row(draw, path, goal, y, width)
            y += 90

    def _draw_goal_row(self, draw: ImageDraw.ImageDraw, path: str, goal: Goal, y: int, width: int):
        """Draw a goal's path, both counters and a daily progress bar."""
        x_margin = 20

        draw.text((x_margin, y), path, fill=TEXT_COLOR, font=self.fonts["title"])
        draw.text(
            (x_margin, y + 22),
            f"Daily Goal: {goal.daily_goal}, Progress: {goal.daily_progress}",
            fill=TEXT_COLOR,
            font=self.fonts["normal"],
        )
        draw.text(
            (x_margin, y + 40),
            f"Total Goal: {goal.total_goal}, Progress: {goal.total_progress}",
            fill=TEXT_COLOR,
            font=self.fonts["normal"],
        )

        self._draw_progress_bar(
            draw,
            x=x_margin,
            y=y + 62,
            width=width - 2 * x_margin,
            height=10,
            current=goal.daily_progress,
            target=goal.daily_goal,
        )

    def _draw_progress_bar(
        self,
        draw: ImageDraw.ImageDraw,
        x: int,
        y: int,
        width: int,
        height: int,
        current: int,
        target: int,
    ):
        """Draw a bar filled to current/target."""
        draw.rectangle([x, y, x + width, y + height], fill=REMAINING_COLOR)

        filled_width = int(width * progress_fraction(current, target))
        if filled_width > 0:
            draw.rectangle([x, y, x + filled_width, y + height], fill=PROGRESS_COLOR)


def total_daily_progress(goals: GoalsSnapshot) -> int:
    return sum(goal.daily_progress for _, goal in goals)


def total_daily_goal(goals: GoalsSnapshot) -> int:
    return sum(goal.daily_goal for _, goal in goals)


def progress_fraction(current: int, target: int) -> float:
    """Share of target reached, clamped to [0, 1]."""
    if target <= 0:
        return 0.0
    return max(0.0, min(current / target, 1.0))


class GoalsPanel:
    """
    Keeps the rendered panel in step with the goal store.

    Listens on the notification bus and re-renders lazily the next time the
    image is requested.
    """

    def __init__(self, renderer: DashboardRenderer, bus: NotificationBus):
        self.renderer = renderer
        self.bus = bus
        self.goals: GoalsSnapshot = []
        self._image_path: Optional[str] = None
        self._stale = True
        bus.subscribe(self.on_goals_changed)

    def on_goals_changed(self, goals: GoalsSnapshot) -> None:
        self.goals = goals
        self._stale = True

    @property
    def stale(self) -> bool:
        return self._stale

    def image_path(self) -> str:
        """Path of an up-to-date panel image, rendering if needed."""
        if self._stale or self._image_path is None:
            _, self._image_path = self.renderer.render(self.goals)
            self._stale = False
        return self._image_path

    def close(self) -> None:
        self.bus.unsubscribe(self.on_goals_changed)
