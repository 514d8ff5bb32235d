from locust import HttpUser, task, constant


class DashboardUser(HttpUser):
    # Roughly one panel refresh per second per user
    wait_time = constant(1.0)

    @task(3)
    def get_price(self):
        self.client.get("/price")

    @task(2)
    def get_positions(self):
        self.client.get("/positions")

    @task(1)
    def get_forecasts(self):
        self.client.get("/forecasts")

    @task(1)
    def get_voice(self):
        self.client.get("/voice")
