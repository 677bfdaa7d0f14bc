"""
seed.py — Startup data for a fresh in-memory store

One admin account plus the demo catalog of therapeutic games and courses
(three physical kits with stock, three digital products).
"""

import logging

from .auth import AccessGate
from .catalog import CatalogService
from .models import CreateProductCommand, CreateUserCommand

log = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@test.com"
ADMIN_PASSWORD = "admin123"

_IMAGE = "https://images.unsplash.com/photo-{}?auto=format&fit=crop&w=800&h=400"

DEMO_PRODUCTS = [
    CreateProductCommand(
        name="Kit Estimulación Cognitiva",
        description="Conjunto de juegos diseñados para estimular memoria, atención y concentración en niños pequeños.",
        price="18500",
        imageUrl=_IMAGE.format("1558618666-fcd25c85cd64"),
        type="physical",
        ageRange="3-8",
        category="Estimulación Cognitiva",
        stock=12,
    ),
    CreateProductCommand(
        name="Set Terapia Ocupacional",
        description="Herramientas especializadas para el desarrollo de habilidades motoras finas y coordinación.",
        price="35800",
        imageUrl=_IMAGE.format("1571019613454-1cb2f99b2d8b"),
        type="physical",
        ageRange="4-12",
        category="Terapia Ocupacional",
        stock=8,
    ),
    CreateProductCommand(
        name="Juego Mesa Habilidades Sociales",
        description="Dinámico juego para desarrollar empatía, comunicación y trabajo en equipo.",
        price="24300",
        imageUrl=_IMAGE.format("1606092195730-5d7b9af1efc5"),
        type="physical",
        ageRange="7-15",
        category="Habilidades Sociales",
        stock=15,
    ),
    CreateProductCommand(
        name="Actividades Lectoescritura Digital",
        description="Plataforma interactiva para el aprendizaje de lectura y escritura a través del juego.",
        price="12900",
        imageUrl=_IMAGE.format("1513475382585-d06e58bcb0e0"),
        type="digital",
        ageRange="5-10",
        category="Lectoescritura",
    ),
    CreateProductCommand(
        name="Programa Inteligencia Emocional",
        description="Curso digital completo para el desarrollo de habilidades emocionales y autoconocimiento.",
        price="15600",
        imageUrl=_IMAGE.format("1558618666-fcd25c85cd64"),
        type="digital",
        ageRange="6-14",
        category="Inteligencia Emocional",
    ),
    CreateProductCommand(
        name="App Matemáticas Adaptativa",
        description="Aplicación que se adapta al ritmo de aprendizaje para fortalecer habilidades matemáticas.",
        price="9800",
        imageUrl=_IMAGE.format("1509228627152-72ae9ae6848d"),
        type="digital",
        ageRange="8-16",
        category="Matemáticas",
    ),
]


def seed_store(gate: AccessGate, catalog: CatalogService):
    gate.create_user(CreateUserCommand(
        email=ADMIN_EMAIL,
        password=ADMIN_PASSWORD,
        name="María González",
        role="admin",
    ))
    for command in DEMO_PRODUCTS:
        catalog.create(command)
    log.info(f"Seeded admin account and {len(DEMO_PRODUCTS)} products.")
