import json
import os
import sys
import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import httpx

from storefront.app.config import Config
from storefront.app.extensions import db
from storefront.app.factory import create_app
from storefront.catalog.client import ApiClient

API_BASE = "http://store.test/api"

KHAADI_ID = "64b7f0c2a1e4d3b2c1a09f01"
SAPPHIRE_ID = "64b7f0c2a1e4d3b2c1a09f02"

PRODUCTS = [
    {"_id": "p1", "name": "Lawn Shirt", "slug": "lawn-shirt", "price": 1000, "category": "c-shirts",
     "images": ["/img/p1.jpg"], "rating": 4.8, "reviews": 3, "availableSizes": ["S", "M"], "colors": ["Red"],
     "brand": KHAADI_ID},
    {"_id": "p2", "name": "Silk Shirt", "slug": "silk-shirt", "price": 2500, "category": "c-shirts",
     "images": [], "featuredImage": "/img/p2.jpg", "reviews": 12,
     "brand": {"_id": KHAADI_ID, "name": "Khaadi"}},
    {"_id": "p3", "name": "Cotton Dupatta", "slug": "cotton-dupatta", "price": 800, "category": "c-dupatta",
     "description": "Soft cotton", "isNew": True, "brand": "Sapphire"},
    {"_id": "p4", "name": "Linen Shirt", "slug": "linen-shirt", "price": 1800, "category": {"_id": "c-shirts"}},
]

BANNERS = [
    {"_id": "b1", "title": "Summer Sale", "image": "/img/b1.jpg", "buttonLink": "/shop?sale=1"},
    {"_id": "b2", "subtitle": "New arrivals", "image": "/img/b2.jpg", "position": "hero"},
    {"_id": "b3", "title": "Footer promo", "image": "/img/b3.jpg", "position": "footer"},
]

CUSTOMER = {"_id": "cust-1", "firstName": "Ayesha", "lastName": "Khan", "email": "ayesha@example.com"}

CATEGORIES = [
    {"_id": "c-shirts", "name": "Shirts", "slug": "shirts", "description": "Everyday shirts"},
    {"_id": "c-dupatta", "name": "Dupatta", "slug": "dupatta"},
    {"_id": "c-silk", "name": "Silk Shirts", "slug": "silk-shirts", "parentId": "c-shirts"},
]

BRANDS = [
    {"_id": KHAADI_ID, "name": "Khaadi", "slug": "khaadi", "country": "PK"},
    {"_id": SAPPHIRE_ID, "name": "Sapphire", "slug": "sapphire"},
    {"name": "No id"},
]


class FakeStoreApi:
    """In-memory stand-in for the remote store API, served through httpx.MockTransport."""

    def __init__(self):
        self.products = [dict(p) for p in PRODUCTS]
        self.banners = [dict(b) for b in BANNERS]
        self.categories = {"data": [dict(c) for c in CATEGORIES]}
        self.brands = [dict(b) for b in BRANDS]
        self.profile = dict(CUSTOMER)
        self.password = "Secret123!"
        self.token = "tok-1"
        self.revoked = set()
        self.profile_status = 200
        self.orders = [
            {"_id": "o1", "orderNumber": "1001", "status": "delivered", "totalAmount": 2000},
            {"_id": "o2", "orderNumber": "1002", "status": "pending", "totalAmount": 1500},
        ]
        self.created_orders = []
        self.registered = []
        self.calls = []

    def handle(self, request: httpx.Request) -> httpx.Response:
        auth = request.headers.get("Authorization")
        self.calls.append((request.method, request.url.path, auth))
        path = request.url.path.removeprefix("/api")

        if request.method == "GET" and path == "/products":
            return httpx.Response(200, json=self.products)
        if request.method == "GET" and path == "/banners":
            return httpx.Response(200, json=self.banners)
        if request.method == "GET" and path == "/categories":
            return httpx.Response(200, json=self.categories)
        if request.method == "GET" and path == "/brands":
            return httpx.Response(200, json=self.brands)
        if request.method == "POST" and path == "/auth/register":
            data = json.loads(request.content)
            if not data.get("password"):
                return httpx.Response(400, json={"message": "Password required"})
            if data.get("email") == self.profile["email"]:
                return httpx.Response(409, json={"message": "Email already registered"})
            self.registered.append(data)
            customer = {k: v for k, v in data.items() if k != "password"}
            customer["_id"] = f"cust-{len(self.registered) + 1}"
            return httpx.Response(201, json={"token": "tok-new", "customer": customer})
        if request.method == "POST" and path == "/auth/login":
            data = json.loads(request.content)
            if data.get("password") != self.password:
                return httpx.Response(401, json={"message": "Invalid credentials"})
            return httpx.Response(200, json={"token": self.token, "customer": self.profile})

        if path in ("/customers/profile", "/orders/my-orders", "/orders"):
            token = (auth or "").removeprefix("Bearer ")
            if path != "/orders" and (not token or token in self.revoked):
                return httpx.Response(401, json={"message": "Unauthorized"})

        if path == "/customers/profile":
            if self.profile_status != 200:
                return httpx.Response(self.profile_status, json={"message": "unavailable"})
            if request.method == "PATCH":
                self.profile.update(json.loads(request.content))
            return httpx.Response(200, json=self.profile)
        if request.method == "GET" and path == "/orders/my-orders":
            return httpx.Response(200, json=self.orders)
        if request.method == "POST" and path == "/orders":
            order = json.loads(request.content)
            self.created_orders.append(order)
            return httpx.Response(201, json={"_id": f"o{len(self.created_orders) + 100}", **order})

        return httpx.Response(404, json={"message": "not found"})


class FakeTimer:
    def __init__(self, clock, due, callback):
        self.clock = clock
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class FakeClock:
    """Scheduler driven by advance(); timers fire in due order."""

    def __init__(self):
        self.now = 0.0
        self.timers = []

    def call_later(self, delay, callback):
        timer = FakeTimer(self, self.now + delay, callback)
        self.timers.append(timer)
        return timer

    def pending(self):
        return [t for t in self.timers if not t.cancelled and not t.fired]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [t for t in self.pending() if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = timer.due
            timer.fired = True
            timer.callback()
        self.now = target


class ConfigForTests(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    API_BASE_URL = API_BASE
    RECENTLY_VIEWED_LIMIT = 3


@pytest.fixture()
def fake_api():
    return FakeStoreApi()


@pytest.fixture()
def api_client(fake_api):
    client = ApiClient(API_BASE, transport=httpx.MockTransport(fake_api.handle))
    yield client
    client.close()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def app(api_client, clock):
    app = create_app(ConfigForTests, api_client=api_client, scheduler=clock)

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.drop_all()
    app.extensions["storefront.carousels"].close()


@pytest.fixture()
def client(app):
    with app.test_client() as client:
        yield client
