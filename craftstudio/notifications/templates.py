"""
Email bodies for guest access links, order lifecycle notifications and payment receipts.

Each builder returns (subject, text, html).
"""
from django.utils.html import escape

STATUS_LABELS = {
    'submitted': 'Submitted',
    'paid': 'Paid',
    'in_production': 'In production',
    'shipping': 'Shipping',
    'delivered': 'Delivered',
}


def _wrap(body_html):
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 560px; margin: 0 auto;">'
        f'{body_html}'
        '<p style="color: #888; font-size: 12px;">Prism Craft Studio</p>'
        '</div>'
    )


def magic_link_email(link, order_number=None):
    subject = 'Your secure link to view your order' if order_number else 'Your sign-in link'
    intro = f'Use the link below to view order {order_number}.' if order_number else \
        'Use the link below to access your orders.'
    text = f"{intro}\n\n{link}\n\nThis link expires in 15 minutes and can only be used once."
    html = _wrap(
        f'<p>{escape(intro)}</p>'
        f'<p><a href="{escape(link)}">Open my order</a></p>'
        '<p>This link expires in 15 minutes and can only be used once.</p>'
    )
    return subject, text, html


def order_status_email(order, old_status, new_status):
    label = STATUS_LABELS.get(new_status, new_status)
    subject = f'Order {order.order_number} is now {label.lower()}'
    lines = [f'Your order {order.order_number} moved from {STATUS_LABELS.get(old_status, old_status)} to {label}.']
    if new_status == 'shipping' and order.tracking_number:
        lines.append(f'Tracking number: {order.tracking_number}')
    text = '\n'.join(lines)
    html = _wrap(''.join(f'<p>{escape(line)}</p>' for line in lines))
    return subject, text, html


def payment_receipt_email(order, payment):
    amount = f"${payment.amount_cents / 100:,.2f}"
    phase = 'deposit' if payment.phase == 'deposit' else 'balance'
    subject = f'Payment received for order {order.order_number}'
    text = (
        f"We received your {phase} payment of {amount} for order {order.order_number}.\n"
        f"Total paid so far: ${order.total_paid_amount:,.2f} of ${order.total_amount:,.2f}."
    )
    html = _wrap(''.join(f'<p>{escape(line)}</p>' for line in text.split('\n')))
    return subject, text, html


def order_created_email(order):
    subject = f'Order confirmation - {order.order_number}'
    greeting = f'Thank you for your order, {order.customer_name or "valued customer"}!'
    lines = [
        f'Order number: {order.order_number}',
        f'Total amount: ${order.total_amount:,.2f}',
        f'Deposit required: ${order.deposit_amount:,.2f}',
    ]
    next_steps = [
        'Complete your deposit payment to begin production.',
        "We'll review your design and start crafting your order.",
        'You will receive updates throughout production.',
        'Pay the balance when your order is ready to ship.',
    ]
    text = '\n'.join([greeting, ''] + lines + ['', 'What happens next:'] +
                     [f'{i}. {step}' for i, step in enumerate(next_steps, 1)])
    html = _wrap(
        f'<p>{escape(greeting)}</p>'
        + ''.join(f'<p>{escape(line)}</p>' for line in lines)
        + '<ol>' + ''.join(f'<li>{escape(step)}</li>' for step in next_steps) + '</ol>'
    )
    return subject, text, html


def production_update_email(order, update):
    subject = f'Production update - {order.order_number}'
    lines = [f'Your order {order.order_number} has a new production update.',
             f'Stage: {update.stage.replace("_", " ")} ({update.status.replace("_", " ")})']
    if update.description:
        lines.append(update.description)
    if update.estimated_completion:
        lines.append(f'Estimated completion: {update.estimated_completion:%Y-%m-%d}')
    text = '\n'.join(lines)
    html = _wrap(''.join(f'<p>{escape(line)}</p>' for line in lines)
                 + ''.join(f'<p><img src="{escape(url)}" alt="" style="max-width: 100%;"></p>'
                           for url in update.photos or []))
    return subject, text, html


def order_completed_email(order):
    subject = f'Order completed - {order.order_number}'
    lines = [f'Your order {order.order_number} has been delivered.',
             'Thank you for creating with us. We hope you love the result.']
    text = '\n'.join(lines)
    html = _wrap(''.join(f'<p>{escape(line)}</p>' for line in lines))
    return subject, text, html
