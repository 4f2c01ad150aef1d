#!/usr/bin/env python3
"""
Replay visualization using folium maps.
"""

from typing import List
import logging
import folium
from folium.template import Template

from .geometry import to_lat_lon
from .metrics import ReplayMetrics
from .polyline import Polyline
from .replay import FixResult

logger = logging.getLogger(__name__)

ROUTE_COLOR = "#2E86AB"
MATCHED_COLOR = "#D23C4C"
UNMATCHED_COLOR = "#9E9E9E"


class ReplayLegend(folium.MacroElement):
    """Custom legend for replay visualization with dynamic counts."""

    def __init__(self, metrics: ReplayMetrics):
        super().__init__()
        self.matched_count = metrics.matched_fixes
        self.unmatched_count = metrics.unmatched_fixes

        self._template = Template(
            """
        {% macro html(this, kwargs) %}
        <div id="replay-legend" style="
            position: fixed;
            bottom: 50px;
            left: 50px;
            width: 230px;
            background-color: white;
            border: 2px solid grey;
            z-index: 9999;
            font-size: 13px;
            padding: 12px;
            font-family: Arial, sans-serif;
            border-radius: 5px;
            box-shadow: 0 2px 5px rgba(0,0,0,0.2);
        ">
            <b>Legend</b><br>
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: #2E86AB; font-size: 18px;">—</span>
                Route
            </div>
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: #D23C4C; font-size: 18px;">●</span>
                Matched fixes ({{ this.matched_count }})
            </div>
            <div style="margin: 4px 0; line-height: 1.3;">
                <span style="color: #9E9E9E; font-size: 18px;">●</span>
                Unmatched fixes ({{ this.unmatched_count }})
            </div>
        </div>
        {% endmacro %}
        """
        )


def create_replay_map(
    polyline: Polyline,
    results: List[FixResult],
    output_filename: str,
    metrics: ReplayMetrics,
    bbox_buffer: float = 50.0,
) -> None:
    """
    Create an interactive map of a route, the replayed fixes and their matches, save as HTML.

    Args:
        polyline: Route geometry
        results: FixResult objects from the replay
        output_filename: Path where HTML map file should be saved
        metrics: ReplayMetrics for the legend
        bbox_buffer: Buffer around the route in meters

    Raises:
        ValueError: If the route is empty
    """
    if not polyline:
        raise ValueError("Cannot create map for empty route")

    south, west, north, east = polyline.get_bbox(bbox_buffer)
    center_lat = (south + north) / 2
    center_lon = (west + east) / 2

    logger.debug(f"Creating map centered at ({center_lat:.4f}, {center_lon:.4f})")

    replay_map = folium.Map(location=[center_lat, center_lon], tiles=None)

    folium.TileLayer(
        tiles="CartoDB positron",
        attr=(
            "&copy; <a href='https://www.openstreetmap.org/copyright'>OpenStreetMap</a> "
            "contributors &copy; <a href='https://carto.com/attributions'>CARTO</a>"
        ),
        name="Standard",
        control=True,
        show=True,
    ).add_to(replay_map)

    folium.TileLayer(
        tiles="https://server.arcgisonline.com/ArcGIS/rest/services/World_Imagery/MapServer/tile/{z}/{y}/{x}",
        attr=(
            "Tiles &copy; Esri &mdash; Source: Esri, i-cubed, USDA, USGS, AEX, GeoEye, "
            "Getmapping, Aerogrid, IGN, IGP, UPR-EGP, and the GIS User Community"
        ),
        name="Satellite",
        control=True,
        show=False,
    ).add_to(replay_map)

    folium.LayerControl().add_to(replay_map)

    positions = polyline.to_positions()
    folium.PolyLine(
        [[pos.latitude, pos.longitude] for pos in positions],
        color=ROUTE_COLOR,
        weight=3,
        opacity=0.6,
        popup="Route",
        z_index=1,
    ).add_to(replay_map)

    folium.Marker(
        [positions[0].latitude, positions[0].longitude],
        popup="Start",
        icon=folium.Icon(color="green", icon="play"),
    ).add_to(replay_map)

    folium.Marker(
        [positions[-1].latitude, positions[-1].longitude],
        popup="End",
        icon=folium.Icon(color="red", icon="stop"),
    ).add_to(replay_map)

    for i, result in enumerate(results):
        fix = result.fix.position
        if result.matched.is_valid():
            matched = to_lat_lon(result.matched.point)
            popup = (
                f"<b>Fix {i}</b><br>segment {result.matched.segment_index}<br>"
                f"{result.distance_from_begin_m / 1000:.3f} km from start; "
                f"{result.distance_to_end_m / 1000:.3f} km to go"
            )
            folium.PolyLine(
                [[fix.latitude, fix.longitude], [matched.latitude, matched.longitude]],
                color=MATCHED_COLOR,
                weight=1,
                opacity=0.5,
            ).add_to(replay_map)
            color = MATCHED_COLOR
        else:
            popup = f"<b>Fix {i}</b><br>no match"
            color = UNMATCHED_COLOR

        folium.CircleMarker(
            [fix.latitude, fix.longitude],
            radius=3,
            color=color,
            fill=True,
            popup=folium.Popup(popup, max_width=300),
        ).add_to(replay_map)

    replay_map.add_child(ReplayLegend(metrics))
    replay_map.fit_bounds([[south, west], [north, east]])
    replay_map.save(output_filename)

    logger.debug(
        f"Map saved to {output_filename} with {metrics.matched_fixes}/{metrics.total_fixes} fixes matched"
    )
