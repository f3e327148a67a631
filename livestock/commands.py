# flask CLI commands: flask init-db, flask seed-reference, flask check-sla,
# flask send-enquiry-reminders, flask grant-role
import click
from flask.cli import with_appcontext
from livestock import db
from livestock.models import SubscriptionPlan, User
from livestock.services import helpdesk_service, marketplace_service
from livestock.utils.role_utils import grant_role

DEFAULT_PLANS = [
    {'name': 'Free', 'description': 'Animal registry and health records', 'price': 0, 'duration_months': 1,
     'features': ['Up to 10 animals', 'Health and vaccination records', 'Marketplace access']},
    {'name': 'Standard', 'description': 'Everything in Free plus feeding and AI assistant', 'price': 199,
     'duration_months': 1,
     'features': ['Up to 100 animals', 'Feeding and feed inventory', 'AI veterinary assistant']},
    {'name': 'Premium', 'description': 'Unlimited animals and priority helpdesk', 'price': 1999,
     'duration_months': 12,
     'features': ['Unlimited animals', 'Priority helpdesk', 'All Standard features']},
]


@click.command('init-db')
@with_appcontext
def init_db():
    db.create_all()
    print('Database initialized.')


@click.command('seed-reference')
@with_appcontext
def seed_reference():
    """Default SLA targets and subscription plans."""
    created = helpdesk_service.seed_sla_defaults()
    plans = 0
    for plan in DEFAULT_PLANS:
        if not SubscriptionPlan.query.filter_by(name=plan['name']).first():
            db.session.add(SubscriptionPlan(**plan))
            plans += 1
    db.session.commit()
    print(f'Seeded {created} SLA config(s) and {plans} plan(s).')


@click.command('check-sla')
@with_appcontext
def check_sla():
    flagged = helpdesk_service.check_sla_breaches()
    print(f'{flagged} ticket(s) flagged as SLA breached.')


@click.command('send-enquiry-reminders')
@click.option('--hours', default=marketplace_service.ENQUIRY_REMINDER_HOURS, show_default=True,
              help='Remind sellers about enquiries pending longer than this.')
@with_appcontext
def send_enquiry_reminders(hours):
    sent = marketplace_service.send_enquiry_reminders(max_age_hours=hours)
    print(f'Sent {sent} enquiry reminder(s).')


@click.command('grant-role')
@click.argument('email')
@click.argument('role')
@with_appcontext
def grant_role_command(email, role):
    user = User.query.filter_by(email=email.strip().lower()).first()
    if user is None:
        raise click.ClickException(f'No user with email {email}')
    roles, error = grant_role(user.id, role)
    if error:
        raise click.ClickException(error)
    print(f"{email} now has roles: {', '.join(sorted(roles))}")


def register_commands(app):
    app.cli.add_command(init_db)
    app.cli.add_command(seed_reference)
    app.cli.add_command(check_sla)
    app.cli.add_command(send_enquiry_reminders)
    app.cli.add_command(grant_role_command)
