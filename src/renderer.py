"""Image renderer for repository badges."""

from dataclasses import dataclass

from PIL import Image, ImageDraw, ImageOps

from assets import AssetBundle, Font
from gradient import Gradient
from models import RepositoryStats

WHITE = (255, 255, 255, 255)
SHADOW_COLOR = (0, 0, 0, 122)
SHADOW_OFFSET = (1, 1)


def format_number(number: int) -> str:
    """
    Shorten a count for display: 999, 1.5k, 2.3m.

    The tier is picked from the raw value, so 999_999 renders as "1000.0k".
    """
    if number >= 1_000_000:
        return f"{number / 1_000_000:.1f}m"
    if number >= 1_000:
        return f"{number / 1_000:.1f}k"
    return str(number)


def with_opacity(image: Image.Image, opacity: float) -> Image.Image:
    """Return a copy of an RGBA image with its alpha scaled by ``opacity``."""
    image = image.convert("RGBA")
    alpha = image.getchannel("A").point(lambda a: int(a * opacity))
    image.putalpha(alpha)
    return image


@dataclass(frozen=True)
class MetricSlot:
    """An icon and a formatted count anchored at ``x``."""

    icon: str
    x: int
    text: str


class BadgeRenderer:
    """Renders the repository badge."""

    CARD_WIDTH = 420
    CARD_HEIGHT = 80

    TITLE_POSITION = (15, 15)
    SUBTITLE_POSITION = (15, 40)
    TITLE_COLOR = (0, 0, 0, int(255 * 0.7))
    SCRIM_COLOR = (0, 0, 0, int(255 * 0.2))

    PRIMARY_METRIC_X = 334
    SECONDARY_METRIC_X = 387
    METRIC_ICON_Y = 17
    METRIC_TEXT_Y = 47
    METRIC_ICON_OPACITY = 0.7

    SAMPLE_SIZE = 200
    SAMPLE_STRIP_HEIGHT = 20

    def __init__(self, assets: AssetBundle):
        self.assets = assets
        self._icons = {
            "star": with_opacity(assets.star_icon, self.METRIC_ICON_OPACITY),
            "fork": with_opacity(assets.fork_icon, self.METRIC_ICON_OPACITY),
            "download": with_opacity(assets.download_icon, self.METRIC_ICON_OPACITY),
        }

    def render(self, stats: RepositoryStats, gradient: Gradient) -> Image.Image:
        """
        Render the badge.

        Args:
            stats: Repository identity and counters to display
            gradient: Background ramp. Drawn under a dark scrim for text
                contrast when ``gradient.scrim`` is set.

        Returns:
            A 420x80 RGBA image
        """
        image = Image.new("RGBA", (self.CARD_WIDTH, self.CARD_HEIGHT), (0, 0, 0, 255))

        self._draw_background(image, gradient)

        # Text and icons are drawn on a separate layer so alpha blends correctly
        overlay = Image.new("RGBA", image.size, (0, 0, 0, 0))
        draw = ImageDraw.Draw(overlay)

        draw.text(
            self.TITLE_POSITION,
            f"{stats.owner_login}'s",
            font=self.assets.title_font,
            fill=self.TITLE_COLOR,
        )
        self._draw_text_with_shadow(
            draw,
            self.SUBTITLE_POSITION,
            stats.repository_name,
            self.assets.subtitle_font,
        )

        for slot in self.metric_slots(stats):
            self._draw_metric(overlay, draw, slot)

        return Image.alpha_composite(image, overlay)

    def metric_slots(self, stats: RepositoryStats) -> list[MetricSlot]:
        """Stars first; downloads take the second slot over forks when known."""
        slots = [MetricSlot("star", self.PRIMARY_METRIC_X, format_number(stats.stargazer_count))]
        if stats.download_count > 0:
            slots.append(
                MetricSlot("download", self.SECONDARY_METRIC_X, format_number(stats.download_count))
            )
        else:
            slots.append(MetricSlot("fork", self.SECONDARY_METRIC_X, format_number(stats.fork_count)))
        return slots

    def _draw_background(self, image: Image.Image, gradient: Gradient) -> None:
        self.fill_gradient(image, gradient, (0, 0, image.width, image.height))
        if gradient.scrim:
            scrim = Image.new("RGBA", image.size, self.SCRIM_COLOR)
            image.alpha_composite(scrim)

    @staticmethod
    def fill_gradient(image: Image.Image, gradient: Gradient, box: tuple[int, int, int, int]) -> None:
        """Fill ``box`` with a left-to-right gradient, one column at a time."""
        x1, y1, x2, y2 = box
        draw = ImageDraw.Draw(image)

        if gradient.is_solid:
            draw.rectangle([x1, y1, x2 - 1, y2 - 1], fill=gradient.stops[0].color + (255,))
            return

        width = x2 - x1
        for column in range(width):
            t = column / (width - 1) if width > 1 else 0.0
            draw.line(
                [(x1 + column, y1), (x1 + column, y2 - 1)],
                fill=gradient.color_at(t) + (255,),
            )

    def _draw_text_with_shadow(
        self,
        draw: ImageDraw.ImageDraw,
        xy: tuple[int, int],
        text: str,
        font: Font,
        color: tuple[int, int, int, int] = WHITE,
    ) -> None:
        x, y = xy
        draw.text((x + SHADOW_OFFSET[0], y + SHADOW_OFFSET[1]), text, font=font, fill=SHADOW_COLOR)
        draw.text((x, y), text, font=font, fill=color)

    def _draw_metric(self, overlay: Image.Image, draw: ImageDraw.ImageDraw, slot: MetricSlot) -> None:
        """Draw an icon with its count centered below it."""
        icon = self._icons[slot.icon]
        overlay.alpha_composite(icon, (slot.x - icon.width // 2, self.METRIC_ICON_Y))

        font = self.assets.metric_font
        bbox = draw.textbbox((0, 0), slot.text, font=font)
        text_width = bbox[2] - bbox[0]
        self._draw_text_with_shadow(
            draw,
            (slot.x - text_width // 2 - bbox[0], self.METRIC_TEXT_Y),
            slot.text,
            font,
        )

    def render_color_sample(self, icon: Image.Image, gradient: Gradient) -> Image.Image:
        """Preview of an icon with the gradient picked from it drawn underneath."""
        size = self.SAMPLE_SIZE
        image = Image.new("RGBA", (size, size + self.SAMPLE_STRIP_HEIGHT), (0, 0, 0, 0))

        fitted = ImageOps.contain(icon.convert("RGBA"), (size, size), Image.Resampling.LANCZOS)
        offset = ((size - fitted.width) // 2, (size - fitted.height) // 2)
        image.alpha_composite(fitted, offset)

        self.fill_gradient(image, gradient, (0, size, size, size + self.SAMPLE_STRIP_HEIGHT))
        return image
