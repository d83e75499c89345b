"""
HTML rendering for the browser front-end.

Each function is a pure mapping from a view model or snapshot to an
HTML string.  Markup is kept plain on purpose; styling is out of scope.
Image tags carry an ``onerror`` handler that swaps in a placeholder
when the sprite fails to load.
"""

from __future__ import annotations

from html import escape
from typing import Optional
from urllib.parse import urlencode

from .details import DetailSnapshot, DetailStatus, attribute_rows, gallery_slots
from .projection import ORDER_OPTIONS, ListViewModel, placeholder_url
from .schemas import PokemonSummary

NO_IMAGE_URL = "https://placehold.co/96x96/E0E0E0/000000?text=No+Image"


def _img(src: str, alt: str, fallback: str, size: int = 96) -> str:
    return (
        f'<img src="{escape(src)}" alt="{escape(alt)}" width="{size}" height="{size}" '
        f"onerror=\"this.onerror=null;this.src='{escape(fallback)}';\">"
    )


def _select(name: str, current: str, options, empty_label: str) -> str:
    rows = [f'<option value="">{escape(empty_label)}</option>']
    for value in options:
        sel = " selected" if value == current else ""
        rows.append(f'<option value="{escape(value)}"{sel}>{escape(value)}</option>')
    return f'<select name="{name}">{"".join(rows)}</select>'


def favorite_button(record: PokemonSummary, is_favorite: bool, back_to: str) -> str:
    label = "Remove from favorites" if is_favorite else "Add to favorites"
    star = "&#9733;" if is_favorite else "&#9734;"
    action = f"/favorites/{record.id}/toggle?{urlencode({'next': back_to})}"
    return (
        f'<form method="post" action="{escape(action)}" class="fav">'
        f'<button type="submit" aria-label="{label}" title="{label}">{star}</button>'
        "</form>"
    )


def render_layout(body: str, favorites_count: int, active: str) -> str:
    def nav(href: str, text: str, key: str) -> str:
        cls = ' class="active"' if key == active else ""
        return f'<a href="{href}"{cls}>{escape(text)}</a>'

    return (
        "<!DOCTYPE html><html><head><meta charset=\"utf-8\"><title>PokeCatalog</title></head>"
        "<body><header><h1>PokeCatalog</h1><nav>"
        + nav("/", "Pokémon list", "list")
        + nav("/favorites", f"My favorites ({favorites_count})", "favorites")
        + f"</nav></header><main>{body}</main></body></html>"
    )


def render_list(view: ListViewModel, action: str, notice: Optional[str] = None) -> str:
    q = view.query
    back_to = action
    params = {k: v for k, v in (
        ("q", q.search), ("ability", q.ability), ("type", q.type),
        ("species", q.species), ("order", q.order),
    ) if v}
    if params:
        back_to = f"{action}?{urlencode(params)}"

    order_opts = "".join(
        f'<option value="{key}"{" selected" if key == q.order else ""}>{escape(text)}</option>'
        for key, text in ORDER_OPTIONS.items()
    )
    parts = [
        f'<form method="get" action="{escape(action)}" class="filters">',
        f'<input type="text" name="q" placeholder="Search Pokémon..." value="{escape(q.search)}">',
        _select("ability", q.ability, view.options.abilities, "All abilities"),
        _select("type", q.type, view.options.types, "All types"),
        _select("species", q.species, view.options.species, "All species"),
        f'<select name="order">{order_opts}</select>',
        '<button type="submit">Apply</button></form>',
    ]
    if notice:
        parts.append(f'<p class="notice" role="status">{escape(notice)}</p>')
    parts.append(f"<h2>{escape(view.title)}</h2>")

    if view.empty_message:
        parts.append(f'<p class="empty">{escape(view.empty_message)}</p>')
    else:
        parts.append('<div class="grid">')
        for card in view.cards:
            r = card.record
            parts.append(
                f'<div class="card" data-id="{r.id}">'
                + favorite_button(r, card.is_favorite, back_to)
                + _img(card.image_url, r.name, card.placeholder_url)
                + f'<span class="name">{escape(r.name)}</span>'
                + f'<a href="/details/{r.id}">View details</a></div>'
            )
        parts.append("</div>")

    p = view.pagination
    if p is not None and p.total_pages > 1:
        prev_dis = "" if p.has_prev else " disabled"
        next_dis = "" if p.has_next else " disabled"
        parts.append(
            '<div class="pagination">'
            f'<form method="post" action="/page/prev"><button type="submit"{prev_dis}>Previous</button></form>'
            f"<span>{escape(p.label)}</span>"
            f'<form method="post" action="/page/next"><button type="submit"{next_dis}>Next</button></form>'
            "</div>"
        )
    return "".join(parts)


def render_details(snapshot: DetailSnapshot, is_favorite: bool) -> str:
    if snapshot.status is DetailStatus.ERRORED:
        return (
            f'<div class="error"><p>{escape(snapshot.error or "")}</p>'
            '<a href="/" class="back">Back to the list</a></div>'
        )
    subject = snapshot.subject
    if subject is None:
        return '<p class="empty">No Pokémon selected.</p>'
    back = '<a href="/" class="back">&larr; Back</a>'

    if snapshot.status is not DetailStatus.LOADED or snapshot.detail is None:
        return f'<p class="loading">Loading Pokémon details...</p>{back}'

    detail = snapshot.detail
    hero_fallback = placeholder_url(detail.name, size="200x200")
    rows = "".join(
        f"<li><span>{escape(label)}:</span> <span>{escape(value)}</span></li>"
        for label, value in attribute_rows(detail)
    )
    gallery = "".join(
        f'<figure>{_img(slot.url, f"{detail.name} {slot.label}", NO_IMAGE_URL)}'
        f"<figcaption>{escape(slot.label)}</figcaption></figure>"
        for slot in gallery_slots(detail)
    )
    return (
        f'<article class="details">{back}'
        + favorite_button(subject, is_favorite, f"/details/{subject.id}")
        + f"<h2>{escape(detail.name)}</h2>"
        + '<div class="hero">'
        + _img(detail.sprites.front_default or hero_fallback, detail.name, hero_fallback, size=200)
        + "<p>Default sprite</p></div>"
        + f"<h3>Characteristics:</h3><ul>{rows}</ul>"
        + f'<h3>Image gallery:</h3><div class="gallery">{gallery}</div></article>'
    )
