"""Routing — exact and subtree path patterns plus static file serving.

Routes are registered during setup and the table is frozen when the
app starts serving.
"""

from perch.routing.mux import ServeMux, not_found, redirect
from perch.routing.route import Route
from perch.routing.static import FileServer

__all__ = ["FileServer", "Route", "ServeMux", "not_found", "redirect"]
