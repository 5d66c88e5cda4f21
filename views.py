from flask import Blueprint, current_app, flash, jsonify, redirect, render_template_string, request, session, url_for

views_bp = Blueprint('views', __name__)

INDEX_TEMPLATE = """<!doctype html>
<title>Notes</title>
{% for message in get_flashed_messages() %}<p class="flash">{{ message }}</p>{% endfor %}
<form method="post" action="{{ url_for('views.add_note') }}">
  <input type="hidden" name="{{ csrf_key }}" value="{{ csrf_token }}">
  <input name="note">
  <button type="submit">Add</button>
</form>
<ul>
{% for note in notes %}
  <li>{{ note }}
    <form method="post" action="{{ url_for('views.delete_note', index=loop.index0) }}">
      <input type="hidden" name="{{ csrf_key }}" value="{{ csrf_token }}">
      <button type="submit">Delete</button>
    </form>
  </li>
{% endfor %}
</ul>
"""


def guard():
    return current_app.extensions['csrf_guard']


@views_bp.route('/')
def index():
    return render_template_string(INDEX_TEMPLATE, notes=session.get('notes', []))


@views_bp.route('/notes', methods=['POST'])
def add_note():
    note = request.form.get('note', '').strip()
    if not note:
        flash('Note cannot be empty.', 'error')
        return redirect(url_for('views.index'))

    session['notes'] = session.get('notes', []) + [note]
    return redirect(url_for('views.index'))


@views_bp.route('/notes/<int:index>/delete', methods=['POST'])
def delete_note(index):
    return guard().protect(_delete_note)(index)


def _delete_note(index):
    notes = list(session.get('notes', []))
    if 0 <= index < len(notes):
        notes.pop(index)
        session['notes'] = notes
    return redirect(url_for('views.index'))


@views_bp.route('/hooks/incoming', methods=['POST'])
def webhook():
    """Server-to-server callback; excluded from CSRF validation."""
    return jsonify({'received': dict(request.form)}), 200


@views_bp.route('/token')
def token():
    return jsonify({'csrf_key': guard().token_key, 'csrf_token': guard().current_token()})
