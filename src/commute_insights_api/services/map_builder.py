"""Render a MapData payload as a standalone Folium map."""

from __future__ import annotations

import html
from pathlib import Path
from typing import Sequence, Tuple

import branca.colormap as cm
import folium

from ..models.domain import (
    Address,
    CommuteScore,
    MapData,
    MapPin,
    MapRadius,
    MapRoute,
)
from .scoring import score_ring_color, transport_mode_name

CONNECTOR_RADIUS_COLOR = "#06b6d4"
FALLBACK_COLOR = "#6b7280"
RADIUS_MODE_COLORS = {
    "drive": "#3b82f6",
    "driving": "#3b82f6",
    "cycle": "#10b981",
    "cycling": "#10b981",
    "walk": "#8b5cf6",
    "walking": "#8b5cf6",
}


def pin_color(pin: MapPin) -> str:
    if pin.type == "connectorStop":
        return "#8B5CF6" if pin.is_ms_building else "#3B82F6"
    if pin.type == "microsoftBuilding":
        return "#059669"
    return "#6B7280"


def pin_emoji(pin: MapPin) -> str:
    return {"connectorStop": "🚌", "microsoftBuilding": "🏢"}.get(pin.type, "📍")


def radius_color(radius: MapRadius) -> str:
    if radius.type == "connectorStopRadius":
        return CONNECTOR_RADIUS_COLOR
    return RADIUS_MODE_COLORS.get(radius.transport_mode.lower(), FALLBACK_COLOR)


class MapBuilder:
    def __init__(self, *, zoom_start: int = 12, route_weight: int = 4, radius_opacity: float = 0.33) -> None:
        self.zoom_start = zoom_start
        self.route_weight = route_weight
        self.radius_opacity = radius_opacity

    def build(
        self,
        map_data: MapData,
        output_html: Path,
        *,
        center: Tuple[float, float],
        zoom: int | None = None,
        scores: Sequence[CommuteScore] | None = None,
    ) -> Path:
        fmap = folium.Map(location=list(center), zoom_start=zoom or self.zoom_start)

        self._add_radii(fmap, map_data.radii)
        self._add_routes(fmap, map_data.routes)
        self._add_pins(fmap, map_data.pins)
        if scores:
            self._add_score_legend(fmap, scores)
        folium.LayerControl(collapsed=False).add_to(fmap)

        output_html.parent.mkdir(parents=True, exist_ok=True)
        fmap.save(output_html)
        return output_html

    # Pins -----------------------------------------------------------------
    def _add_pins(self, fmap: folium.Map, pins: Sequence[MapPin]) -> None:
        if not pins:
            return

        layer = folium.FeatureGroup(name="Locations", show=True)
        for pin in pins:
            lng, lat = pin.coordinates
            color = pin_color(pin)
            folium.Marker(
                location=[lat, lng],
                tooltip=f"{pin_emoji(pin)} {pin.name}",
                popup=folium.Popup(self._pin_popup(pin, color), max_width=300),
                icon=folium.DivIcon(
                    icon_size=(30, 30),
                    icon_anchor=(15, 30),
                    html=(
                        f'<div style="background-color:{color}; border:2px solid white; '
                        f"border-radius:50%; width:30px; height:30px; display:flex; "
                        f"align-items:center; justify-content:center; font-size:14px; "
                        f'box-shadow:0 2px 6px rgba(0,0,0,0.3);">{pin_emoji(pin)}</div>'
                    ),
                ),
            ).add_to(layer)
        layer.add_to(fmap)

    def _pin_popup(self, pin: MapPin, color: str) -> str:
        lines = [f'<h3 style="margin:0 0 8px 0; color:{color};">{html.escape(pin.name)}</h3>']
        if pin.type == "connectorStop":
            parking = "Available" if pin.has_parking else "None"
            description = html.escape(pin.description).replace("\n", "<br/>")
            lines.append("<p><strong>Type:</strong> Connector Stop</p>")
            lines.append(f"<p><strong>Description:</strong> {description}</p>")
            lines.append(f"<p><strong>Parking:</strong> {parking}</p>")
        elif pin.type == "microsoftBuilding":
            lines.append("<p><strong>Type:</strong> Microsoft Building</p>")
            lines.append(f"<p><strong>Building:</strong> {html.escape(pin.building_name)}</p>")
        else:
            lines.append("<p><strong>Type:</strong> Point of Interest</p>")

        address = self._format_address(pin.address)
        if address:
            lines.append(f'<p style="font-size:12px; color:#666;">{address}</p>')
        return "".join(lines)

    def _format_address(self, address: Address | None) -> str:
        if address is None:
            return ""
        parts = []
        if address.street:
            parts.append(html.escape(address.street))
        city_state_zip = ", ".join(value for value in (address.city, address.state) if value)
        if address.zip:
            city_state_zip = f"{city_state_zip} {address.zip}".strip()
        if city_state_zip:
            parts.append(html.escape(city_state_zip))
        return "<br/>".join(parts)

    # Routes ---------------------------------------------------------------
    def _add_routes(self, fmap: folium.Map, routes: Sequence[MapRoute]) -> None:
        if not routes:
            return

        layer = folium.FeatureGroup(name="Routes", show=True)
        for route in routes:
            if not route.geometry.coordinates:
                continue
            color = route.color or "#007bff"
            line = folium.GeoJson(
                route.geometry.model_dump(),
                name=route.name,
                style_function=lambda _feature, color=color: {
                    "color": color,
                    "weight": self.route_weight,
                    "opacity": 0.8,
                },
            )
            folium.Popup(
                f"<strong>{html.escape(route.name)}</strong><br/>"
                f"Distance: {route.distance or '-'}<br/>"
                f"Est. time: {route.estimated_time or '-'}",
                max_width=250,
            ).add_to(line)
            line.add_to(layer)
        layer.add_to(fmap)

    # Radii ----------------------------------------------------------------
    def _add_radii(self, fmap: folium.Map, radii: Sequence[MapRadius]) -> None:
        if not radii:
            return

        layer = folium.FeatureGroup(name="Reachable areas", show=True)
        for radius in radii:
            color = radius_color(radius)
            area = folium.GeoJson(
                radius.geometry,
                name=radius.name,
                style_function=lambda _feature, color=color: {
                    "color": color,
                    "fillColor": color,
                    "fillOpacity": self.radius_opacity,
                    "weight": 2,
                },
            )
            folium.Popup(
                f"<strong>{html.escape(radius.address)}</strong><br/>"
                f"<em>{radius.travel_time_minutes} minute {html.escape(radius.transport_mode)} radius</em>",
                max_width=250,
            ).add_to(area)
            area.add_to(layer)
        layer.add_to(fmap)

    # Scores ---------------------------------------------------------------
    def _add_score_legend(self, fmap: folium.Map, scores: Sequence[CommuteScore]) -> None:
        bands = [0, 60, 70, 80, 90, 100]
        legend = cm.StepColormap(
            colors=[score_ring_color(value) for value in bands[:-1]],
            index=bands,
            vmin=0,
            vmax=100,
        )
        summary = ", ".join(f"{transport_mode_name(item.mode)} {item.score}" for item in scores)
        legend.caption = f"Commute score: {summary}"
        legend.add_to(fmap)


__all__ = ["MapBuilder", "pin_color", "pin_emoji", "radius_color"]
