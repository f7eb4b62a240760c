from flask import Blueprint, jsonify
from flask_login import current_user

from blueprints.helpers import json_body, page_response, parse, query_args, require_roles
from exceptions import NotFound
from models.user import PRIVILEGED_ROLES
from schemas import PopulationCreate, PopulationQuery, PopulationUpdate
from services import population as population_service

population_bp = Blueprint("population", __name__)


# Hanya petugas/admin yang boleh mengelola data penduduk
@population_bp.before_request
def restrict_to_staff():
    require_roles(PRIVILEGED_ROLES)


@population_bp.route("/population", methods=["POST"])
def create_population():
    data = parse(PopulationCreate, json_body())
    population = population_service.create(data, current_user.id)
    return jsonify(population.to_dict()), 201


@population_bp.route("/population/<int:population_id>", methods=["PATCH"])
def update_population(population_id):
    data = parse(PopulationUpdate, json_body())
    population = population_service.update(population_id, data, current_user.id)
    return jsonify(population.to_dict())


@population_bp.route("/population/<int:population_id>")
def get_population(population_id):
    population = population_service.get(population_id)
    if not population:
        raise NotFound("Population record not found")
    return jsonify(population.to_dict())


@population_bp.route("/population")
def list_population():
    query = parse(PopulationQuery, query_args())
    return jsonify(page_response(population_service.list_population(query)))


@population_bp.route("/population/<int:population_id>", methods=["DELETE"])
def delete_population(population_id):
    removed = population_service.delete(population_id, current_user.id)
    return jsonify({"success": removed})


# Cari penduduk berdasarkan NIK (persis, bukan substring)
@population_bp.route("/population/nik/<nik>")
def find_by_nik(nik):
    population = population_service.find_by_nik(nik)
    return jsonify(population.to_dict() if population else None)
