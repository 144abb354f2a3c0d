import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


STATUS_CHOICES = [
    ('submitted', 'Submitted'),
    ('a_register', 'A Register'),
    ('sent_to_court', 'Sent to Court'),
    ('court_replied', 'Court Replied'),
    ('superintendent_received', 'Superintendent Received'),
    ('call_for_notice', 'Call for Notice'),
    ('payment_received', 'Payment Received'),
    ('xerox_assigned', 'Xerox Assigned'),
    ('ready', 'Ready'),
    ('delivered', 'Delivered'),
    ('struck_off', 'Struck Off'),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='GNumberSequence',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('year', models.PositiveIntegerField(unique=True)),
                ('sequence_number', models.PositiveIntegerField(default=0)),
            ],
            options={
                'verbose_name': 'G-Number Sequence',
                'verbose_name_plural': 'G-Number Sequences',
            },
        ),
        migrations.CreateModel(
            name='Application',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('g_number', models.CharField(editable=False, max_length=20, unique=True)),
                ('application_type', models.CharField(choices=[('copy', 'Copy'), ('third_party', 'Third Party')], max_length=20)),
                ('case_type', models.CharField(choices=[('civil', 'Civil'), ('criminal', 'Criminal')], max_length=20)),
                ('priority', models.CharField(choices=[('normal', 'Normal'), ('emergent', 'Emergent')], default='normal', max_length=20)),
                ('base_fee', models.DecimalField(decimal_places=2, max_digits=5)),
                ('applicant_name', models.CharField(max_length=255)),
                ('applicant_address', models.TextField(blank=True)),
                ('advocate_name', models.CharField(blank=True, max_length=255)),
                ('case_number', models.CharField(blank=True, max_length=100)),
                ('case_year', models.PositiveIntegerField(blank=True, null=True)),
                ('case_details', models.TextField(blank=True)),
                ('documents_required', models.TextField(blank=True)),
                ('status', models.CharField(choices=STATUS_CHOICES, default='submitted', max_length=30)),
                ('deadline_date', models.DateField(blank=True, null=True)),
                ('strike_off_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'indexes': [
                    models.Index(fields=['status'], name='application_status_idx'),
                    models.Index(fields=['created_at'], name='application_created_idx'),
                    models.Index(fields=['case_type'], name='application_case_type_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StatusHistory',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('old_status', models.CharField(blank=True, choices=STATUS_CHOICES, max_length=30, null=True)),
                ('new_status', models.CharField(choices=STATUS_CHOICES, max_length=30)),
                ('remarks', models.TextField(blank=True)),
                ('changed_by', models.CharField(blank=True, max_length=100)),
                ('changed_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('application', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='status_history', to='applications.application')),
            ],
            options={
                'verbose_name': 'Status History',
                'verbose_name_plural': 'Status History',
                'ordering': ['changed_at', 'id'],
                'get_latest_by': ['changed_at', 'id'],
            },
        ),
    ]
