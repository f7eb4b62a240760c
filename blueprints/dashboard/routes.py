from flask import Blueprint, current_app, jsonify, send_from_directory

from blueprints.helpers import json_body, parse, require_roles
from models.user import PRIVILEGED_ROLES
from schemas import ApplicationFilters, PopulationFilters, ReportRequest
from services import dashboard, reports

dashboard_bp = Blueprint("dashboard", __name__)


@dashboard_bp.before_request
def restrict_to_staff():
    require_roles(PRIVILEGED_ROLES)


#-------------------------------------------------------
# Dashboard
@dashboard_bp.route("/dashboard/stats")
def stats():
    return jsonify(dashboard.stats())


@dashboard_bp.route("/dashboard/applications-by-type")
def applications_by_type():
    return jsonify(dashboard.applications_by_type())


@dashboard_bp.route("/dashboard/population-by-region")
def population_by_region():
    return jsonify(dashboard.population_by_region())


#-------------------------------------------------------
# Laporan
@dashboard_bp.route("/reports/applications", methods=["POST"])
def export_applications():
    data = parse(ReportRequest, json_body())
    filters = parse(ApplicationFilters, data.filters or {})
    return jsonify(reports.export_applications(data.format, filters)), 201


@dashboard_bp.route("/reports/population", methods=["POST"])
def export_population():
    data = parse(ReportRequest, json_body())
    filters = parse(PopulationFilters, data.filters or {})
    return jsonify(reports.export_population(data.format, filters)), 201


@dashboard_bp.route("/reports/<path:file_name>")
def download_report(file_name):
    return send_from_directory(current_app.config["EXPORT_FOLDER"], file_name, as_attachment=True)
