# cli.py
import os
import sys
from datetime import datetime
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from rich.prompt import IntPrompt, Confirm, Prompt
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich import box

from prompt_toolkit import prompt
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.styles import Style as PromptStyle

from sdk.pystore import StoreClient

console = Console()
c = StoreClient(
    base_url=os.getenv("STOREFRONT_URL", "http://127.0.0.1:8085"),
    user_id=int(os.getenv("STOREFRONT_USER_ID", "1")),
    role=os.getenv("STOREFRONT_ROLE", "user"),
)

status_message = "Ready"
product_cache: List[Dict[str, Any]] = []

SORT_OPTIONS = ["newest", "oldest", "high-price", "low-price"]

custom_style = PromptStyle.from_dict({
    'completion-menu.completion': 'bg:#008888 #ffffff',
    'completion-menu.completion.current': 'bg:#00aaaa #000000',
    'scrollbar.background': 'bg:#88aaaa',
    'scrollbar.button': 'bg:#222222',
})


# ---------------------------
# Display helpers
# ---------------------------
def _average(reviews: List[Dict[str, Any]]) -> str:
    if not reviews:
        return "-"
    return f"{sum(r.get('rating', 0) for r in reviews) / len(reviews):.1f}"


def show_products(products: List[Dict[str, Any]], title: str = "📦 Products Catalog", count: Optional[int] = None):
    if not products:
        console.print("[italic yellow]No products found[/italic yellow]")
        return

    if count is not None:
        title = f"{title} ({len(products)} of {count})"
    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold cyan",
        title_style="bold magenta",
        show_lines=True
    )
    table.add_column("ID", style="dim", width=6)
    table.add_column("Name", style="bold", width=24)
    table.add_column("Slug", width=20)
    table.add_column("Price", justify="right", width=10)
    table.add_column("Category", width=15)
    table.add_column("Rating", justify="right", width=7)

    for p in products:
        category = p.get("category") or {}
        table.add_row(
            str(p.get("id", "N/A")),
            p.get("name") or "[dim]<draft>[/dim]",
            p.get("slug") or "-",
            str(p.get("price", 0)),
            category.get("name") or "-",
            _average(p.get("reviews") or []),
        )
    console.print(table)


def show_orders(orders: List[Dict[str, Any]]):
    if not orders:
        console.print("[italic yellow]No orders found[/italic yellow]")
        return

    table = Table(
        title="📋 Orders",
        box=box.ROUNDED,
        header_style="bold yellow",
        title_style="bold yellow",
        show_lines=True
    )
    table.add_column("Order ID", style="dim", width=10)
    table.add_column("Contents", width=36)
    table.add_column("Status", width=10)
    table.add_column("Total", justify="right", width=10)
    table.add_column("Created", width=20)

    for order in orders:
        items = order.get("items") or []
        contents = ", ".join(f"#{it.get('product_id')} x{it.get('quantity', 1)}" for it in items[:3])
        if len(items) > 3:
            contents += f" +{len(items) - 3} more"

        status = order.get("status", "N/A")
        status_style = "green" if status == "PAYED" else "yellow"
        table.add_row(
            str(order.get("id", "N/A")),
            contents or "No items",
            f"[{status_style}]{status}[/{status_style}]",
            str(order.get("total", 0)),
            str(order.get("created_at", ""))[:19],
        )

    console.print(table)


def show_status(message: str, is_success: bool = True):
    style = "green" if is_success else "red"
    return Panel.fit(f"[{style}]{message}[/{style}]", title="Status")


# ---------------------------
# API wrapper
# ---------------------------
def try_api(fn, *args, success_msg: Optional[str] = None, **kwargs):
    """
    Calls fn(*args, **kwargs) behind a spinner.
    Errors are shown in the status panel and None is returned.
    """
    global status_message
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            transient=True,
        ) as progress:
            progress.add_task(description="Processing...", total=None)
            result = fn(*args, **kwargs)

        if success_msg:
            status_message = success_msg
            console.print(show_status(success_msg, True))
        return result
    except Exception as e:
        status_message = f"Error: {e}"
        console.print(show_status(f"Error: {e}", False))
        return None


def get_product_completer():
    global product_cache
    if not product_cache:
        page = try_api(c.list_products) or {}
        product_cache = page.get("products", [])
    words = [str(p.get("id", "")) for p in product_cache] + [p.get("slug") or "" for p in product_cache]
    return WordCompleter([w for w in words if w], ignore_case=True)


def prompt_with_autocomplete(message: str, completer=None, default: str = ""):
    return prompt(f"{message} ", completer=completer, style=custom_style, default=default)


def ask_optional_int(message: str) -> Optional[int]:
    raw = Prompt.ask(message, default="")
    try:
        return int(raw) if raw.strip() else None
    except ValueError:
        console.print("[red]Not a number, ignored.[/red]")
        return None


def create_header():
    header = Table(show_header=False, box=box.ROUNDED)
    header.add_column("left", width=30)
    header.add_column("center", width=40)
    header.add_column("right", width=30)

    now = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    header.add_row(
        f"🛍️ user {c.user_id} ({c.role})",
        "[bold blue]Storefront CLI[/bold blue]",
        f"[dim]{now}[/dim]"
    )
    return Panel(header, style="bold blue")


# ---------------------------
# Actions
# ---------------------------
def browse_products():
    global product_cache
    term = prompt_with_autocomplete("Search term (blank for all)")
    min_price = ask_optional_int("Min price")
    max_price = ask_optional_int("Max price")
    raw_ratings = Prompt.ask("Ratings (e.g. 4|5)", default="")
    ratings = [int(r) for r in raw_ratings.split("|") if r.strip().isdigit()]
    sort = prompt_with_autocomplete("Sort", completer=WordCompleter(SORT_OPTIONS), default="newest")
    page = IntPrompt.ask("Page", default=1)

    result = try_api(
        c.list_products, search_term=term or None, min_price=min_price, max_price=max_price,
        ratings=ratings or None, sort=sort, page=page, success_msg="Products loaded"
    )
    if result is not None:
        product_cache = result["products"]
        show_products(result["products"], count=result["count"])


def view_product():
    slug = prompt_with_autocomplete("Product slug", completer=get_product_completer())
    product = try_api(c.get_product_by_slug, slug)
    if product:
        show_products([product], title="ℹ️ Product")
        similar = try_api(c.similar_products, product["id"]) or []
        show_products(similar, title="🔁 Similar products")


def edit_product():
    pid = ask_optional_int("Product ID (blank creates a draft)")
    if pid is None:
        pid = try_api(c.create_product, success_msg="Draft created")
        if pid is None:
            return
    name = prompt_with_autocomplete("Name")
    price = IntPrompt.ask("Price", default=0)
    category_id = IntPrompt.ask("Category ID", default=1)
    description = prompt_with_autocomplete("Description")
    product = try_api(c.update_product, pid, name, price, category_id, description,
                      success_msg=f"Product {pid} saved")
    if product:
        show_products([product], title="✏️ Saved product")


def place_order():
    items = []
    while True:
        pid = prompt_with_autocomplete("Product ID (blank to finish)", completer=get_product_completer())
        if not pid.strip():
            break
        qty = IntPrompt.ask("Quantity", default=1)
        price = IntPrompt.ask("Unit price", default=0)
        items.append({"productId": int(pid), "quantity": qty, "price": price})
    if not items:
        console.print("[italic yellow]Nothing to order[/italic yellow]")
        return
    placed = try_api(c.place_order, items, success_msg="Order placed")
    if placed:
        order = placed["order"]
        console.print(Panel.fit(
            f"[green]Order placed successfully![/green]\n"
            f"Order ID: [bold]{order['id']}[/bold]\n"
            f"Total: [bold]{order['total']}[/bold]\n"
            f"Payment description: {placed['payment']['description']}",
            title="✅ Order Confirmation"
        ))


def send_payment():
    order_id = IntPrompt.ask("Order ID")
    event = prompt_with_autocomplete(
        "Event", completer=WordCompleter(["payment.succeeded", "payment.waiting_for_capture"]),
        default="payment.succeeded"
    )
    resp = try_api(c.send_payment_event, event, f"Order #{order_id}", {"order_id": str(order_id)})
    if resp is not None:
        console.print(Panel.fit(str(resp.json()), title=f"Webhook → HTTP {resp.status_code}"))


def menu():
    console.clear()
    console.print(create_header())

    actions = {
        "1": ("📦 Browse products", browse_products),
        "2": ("ℹ️ View product + similar", view_product),
        "3": ("🏷️ List categories", lambda: console.print(try_api(c.list_categories))),
        "4": ("✏️ Create / edit product", edit_product),
        "5": ("✅ Place order", place_order),
        "6": ("📋 My orders", lambda: show_orders(try_api(c.list_orders) or [])),
        "7": ("💳 Send payment event", send_payment),
    }

    while True:
        if status_message:
            console.print(show_status(status_message, "Error" not in status_message))

        menu_table = Table.grid(padding=(0, 2))
        menu_table.add_column("Key", style="bold cyan", width=4)
        menu_table.add_column("Option", width=34)
        for key, (label, _) in actions.items():
            menu_table.add_row(key, label)
        menu_table.add_row("q", "👋 Quit")
        console.print(Panel(menu_table, title="📋 Menu", border_style="yellow"))

        choice = prompt_with_autocomplete(
            "\nChoose an option",
            completer=WordCompleter(list(actions) + ["q", "quit", "exit"])
        ).strip()

        if choice in actions:
            actions[choice][1]()
        elif choice.lower() in ("q", "quit", "exit"):
            if Confirm.ask("Are you sure you want to quit?"):
                console.print(Panel.fit("[bold green]Bye! 👋[/bold green]", title="Goodbye"))
                sys.exit(0)

        console.print()
        console.rule(style="dim")


if __name__ == "__main__":
    try:
        menu()
    except KeyboardInterrupt:
        console.print("\n\n[bold red]Interrupted by user[/bold red]")
        sys.exit(1)
