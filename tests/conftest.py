"""Shared HTML fixtures."""
import pytest

BASE_URL = "https://www.lesptitscageots.fr"

WELCOME_HTML = """
<html><body>
<p class="info-account">Bienvenue sur votre page d'accueil. Vous pouvez y gérer vos informations personnelles ainsi que vos commandes.</p>
</body></html>
"""

BAD_PASSWORD_HTML = """
<html><body>
<div class="alert alert-danger"><p>Il y a 1 erreur</p><ol><li>&Eacute;chec d&#039;authentification</li></ol></div>
<form action="https://www.lesptitscageots.fr/authentification" method="post" id="login_form" class="box"></form>
</body></html>
"""


def order_row(date="20211021231457", amount="86.15", ref="DDVMDIJTQ",
              status="Commande traitée", invoice="index.php?controller=pdf-invoice&amp;id_order=129403",
              row_class="first_item"):
    invoice_cell = (
        f'<td class="history_invoice"><a class="link-button" href="{invoice}"><i class="icon-file-text"></i></a></td>'
        if invoice else '<td class="history_invoice">-</td>'
    )
    date_attr = f' data-value="{date}"' if date is not None else ""
    amount_attr = f' data-value="{amount}"' if amount is not None else ""
    ref_cell = f"<a class=\"color-myaccount\">{ref}</a>" if ref is not None else ""
    return f"""
        <tr class="{row_class} ">
            <td class="history_link bold footable-first-column">{ref_cell}</td>
            <td{date_attr} class="history_date bold">21/10/2021</td>
            <td class="history_price"{amount_attr}><span class="price">86,15 €</span></td>
            <td class="history_method">Carte bancaire</td>
            <td class="history_state"><span class="label dark">{status}</span></td>
            {invoice_cell}
        </tr>
    """


def order_page(*rows: str) -> str:
    return f"""
    <html><body>
    <h1 class="page-heading bottom-indent">Historique de vos commandes</h1>
    <table id="order-list" class="table table-bordered footab">
        <thead><tr><th>Référence de commande</th><th>Date</th><th>Prix total</th></tr></thead>
        <tbody>{''.join(rows)}</tbody>
    </table>
    </body></html>
    """


@pytest.fixture
def scenario_html() -> str:
    """Two rows, only the first one has an invoice."""
    return order_page(
        order_row(),
        order_row(status="Erreur de paiement", row_class="last_item"),
    )
