import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('applications', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ARegister',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('received_date', models.DateField(default=django.utils.timezone.localdate)),
                ('remarks', models.TextField(blank=True)),
                ('returned_date', models.DateField(blank=True, null=True)),
                ('clerk_initials', models.CharField(blank=True, max_length=10)),
                ('processing_days', models.IntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('application', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='a_register_entries', to='applications.application')),
            ],
            options={
                'verbose_name': 'A Register Entry',
                'verbose_name_plural': 'A Register',
                'ordering': ['received_date', 'id'],
            },
        ),
        migrations.CreateModel(
            name='BRegister',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sent_to_court_date', models.DateField(default=django.utils.timezone.localdate)),
                ('court_name', models.CharField(blank=True, max_length=255)),
                ('court_remarks', models.TextField(blank=True)),
                ('returned_date', models.DateField(blank=True, null=True)),
                ('compliance_status', models.BooleanField(default=False)),
                ('clerk_initials', models.CharField(blank=True, max_length=10)),
                ('processing_days', models.IntegerField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('application', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='b_register_entries', to='applications.application')),
            ],
            options={
                'verbose_name': 'B Register Entry',
                'verbose_name_plural': 'B Register',
                'ordering': ['sent_to_court_date', 'id'],
            },
        ),
        migrations.CreateModel(
            name='CallForNotice',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('notice_date', models.DateField(default=django.utils.timezone.localdate)),
                ('grace_period_end', models.DateField(blank=True, null=True)),
                ('pages_estimated', models.PositiveIntegerField(blank=True, null=True)),
                ('fee_calculated', models.DecimalField(blank=True, decimal_places=2, max_digits=8, null=True)),
                ('is_struck_off', models.BooleanField(default=False)),
                ('struck_off_date', models.DateField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('application', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notices', to='applications.application')),
            ],
            options={
                'verbose_name': 'Call for Notice',
                'verbose_name_plural': 'Calls for Notice',
                'ordering': ['notice_date', 'id'],
            },
        ),
        migrations.CreateModel(
            name='Payment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('amount', models.DecimalField(decimal_places=2, max_digits=8)),
                ('pages_count', models.PositiveIntegerField()),
                ('per_page_rate', models.DecimalField(blank=True, decimal_places=2, max_digits=5, null=True)),
                ('payment_date', models.DateField(default=django.utils.timezone.localdate)),
                ('payment_method', models.CharField(blank=True, max_length=50)),
                ('receipt_number', models.CharField(blank=True, max_length=100)),
                ('advocate_name', models.CharField(blank=True, max_length=255)),
                ('recorded_by', models.CharField(blank=True, max_length=100)),
                ('remarks', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('application', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='payments', to='applications.application')),
            ],
            options={
                'ordering': ['payment_date', 'id'],
            },
        ),
        migrations.CreateModel(
            name='XeroxOperation',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('assigned_date', models.DateField(default=django.utils.timezone.localdate)),
                ('operator_name', models.CharField(blank=True, max_length=100)),
                ('pages_copied', models.PositiveIntegerField(blank=True, null=True)),
                ('completed_date', models.DateField(blank=True, null=True)),
                ('remarks', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('application', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='xerox_operations', to='applications.application')),
            ],
            options={
                'verbose_name': 'Xerox Operation',
                'verbose_name_plural': 'Xerox Operations',
                'ordering': ['assigned_date', 'id'],
            },
        ),
    ]
