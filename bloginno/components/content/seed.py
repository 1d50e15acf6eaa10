"""
Built-in seed dataset.

Served when the backing store cannot be reached at session start, so the
site always has something to render.
"""

from __future__ import annotations

from bloginno.domain.entities import Article, Category

SEED_CATEGORIES: tuple[Category, ...] = (
    Category(id="innovation", name="Innovation", icon="Lightbulb"),
    Category(id="project", name="Projects", icon="Rocket"),
    Category(id="update", name="Updates", icon="RefreshCw"),
)

SEED_ARTICLES: tuple[Article, ...] = (
    Article(
        id=1,
        title="The Future of AI in Service Design",
        summary=(
            "Exploring how artificial intelligence is reshaping service design "
            "and customer experiences"
        ),
        content=(
            "Artificial intelligence is revolutionizing how we design and deliver services. "
            "From chatbots to predictive analytics, AI is enabling more personalized and "
            "efficient service experiences. This article explores the latest trends and "
            "future possibilities in AI-driven service design."
        ),
        date="March 7, 2025",
        read_time="5 min read",
        image_url="https://images.unsplash.com/photo-1677442136019-21780ecad995",
        category="innovation",
    ),
    Article(
        id=2,
        title="Sustainable Service Solutions",
        summary="How companies are incorporating sustainability into their service offerings",
        content=(
            "Sustainability is no longer optional in service design. This article examines "
            "how leading companies are redesigning their services to be more environmentally "
            "friendly while maintaining high quality and user satisfaction."
        ),
        date="March 6, 2025",
        read_time="4 min read",
        image_url="https://images.unsplash.com/photo-1497366216548-37526070297c",
        category="project",
    ),
    Article(
        id=3,
        title="Digital Transformation Success Stories",
        summary="Case studies of successful digital transformation initiatives",
        content=(
            "Digital transformation is reshaping industries. Through these case studies, we "
            "explore how organizations have successfully navigated their digital "
            "transformation journeys."
        ),
        date="March 5, 2025",
        read_time="6 min read",
        image_url="https://images.unsplash.com/photo-1460925895917-afdab827c52f",
        category="update",
    ),
)
