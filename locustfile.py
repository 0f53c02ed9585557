from locust import HttpUser, task, between
import random

class ShopperUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Register a fresh account for this simulated client, then log in
        email = f"user_{random.randint(1, 1_000_000_000)}@loadtest.local"
        self.headers = None
        r = self.client.post("/api/auth/registrar", json={"nome_completo": "Load Test", "email": email, "senha": "senha123"})
        if r.status_code != 201:
            return
        r = self.client.post("/api/auth/login", json={"email": email, "senha": "senha123"})
        if r.status_code == 200:
            self.headers = {"Authorization": f"Bearer {r.json()['token']}"}

    @task(3)
    def create_order(self):
        if not self.headers:
            return
        items = [
            {"produto_id": i, "nome_produto": f"Produto {i}", "quantidade": random.randint(1, 3), "valor_unitario": "19.90"}
            for i in range(1, random.randint(2, 6))
        ]
        total = sum(item["quantidade"] for item in items) * 19.90
        self.client.post("/api/pedidos", headers=self.headers, json={
            "itens": items,
            "endereco_entrega": "Rua Teste, 1",
            "valor_frete": "10.00",
            "valor_total": f"{total + 10:.2f}",
            "forma_pagamento": "pix",
            "prazo_entrega": "5 dias úteis",
        })

    @task(2)
    def list_my_orders(self):
        if self.headers:
            self.client.get("/api/meus-pedidos", headers=self.headers)

    @task(1)
    def browse(self):
        self.client.get("/api/produtos")
        self.client.get("/api/noticias")
