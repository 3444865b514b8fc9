"""
Admin pages - bare HTML shells over the JSON API
"""
from fastapi import APIRouter
from fastapi.responses import HTMLResponse

router = APIRouter(prefix="/admin", tags=["pages"], include_in_schema=False)

LOGIN_PAGE = """<!doctype html>
<html>
<head><meta charset="utf-8"><title>Admin login</title></head>
<body>
<form id="login">
  <h1>Admin login</h1>
  <input type="password" name="password" autocomplete="current-password" required>
  <button type="submit">Log in</button>
  <p id="error" role="alert"></p>
</form>
<script>
document.getElementById("login").addEventListener("submit", async (e) => {
  e.preventDefault();
  const password = e.target.password.value;
  const res = await fetch("/api/admin/login", {
    method: "POST",
    headers: {"Content-Type": "application/json"},
    credentials: "include",
    body: JSON.stringify({password}),
  });
  const json = await res.json();
  if (!res.ok || !json.ok) {
    document.getElementById("error").textContent = json.error || "Login failed";
    return;
  }
  const next = new URLSearchParams(location.search).get("next") || "/admin/orders";
  location.replace(next);
});
</script>
</body>
</html>
"""

ORDERS_PAGE = """<!doctype html>
<html>
<head><meta charset="utf-8"><title>Orders</title></head>
<body>
<header>
  <h1>Orders</h1>
  <span>Pending <b id="pending">0</b></span>
  <button id="logout">Log out</button>
</header>
<p id="error" role="alert"></p>
<ul id="orders"></ul>
<script>
async function refresh() {
  try {
    const res = await fetch("/api/orders", {credentials: "include"});
    const json = await res.json();
    if (!res.ok || !json.ok) throw new Error(json.error || "Failed to load orders");
    document.getElementById("pending").textContent = json.pending_count;
    document.getElementById("orders").innerHTML = "";
    for (const o of json.items) {
      const li = document.createElement("li");
      li.textContent = `${o.order_no} [${o.status}] ` +
        o.items.map((it) => `${it.name} x ${it.qty}`).join(", ");
      document.getElementById("orders").appendChild(li);
    }
    document.getElementById("error").textContent = "";
  } catch (e) {
    document.getElementById("error").textContent = e.message;
  }
}
document.getElementById("logout").addEventListener("click", async () => {
  await fetch("/api/admin/logout", {method: "POST", credentials: "include"});
  location.replace("/admin/login");
});
refresh();
setInterval(refresh, 5000);
</script>
</body>
</html>
"""


@router.get("/login", response_class=HTMLResponse)
def login_page():
    return LOGIN_PAGE


@router.get("/orders", response_class=HTMLResponse)
def orders_page():
    return ORDERS_PAGE
